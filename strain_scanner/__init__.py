"""
Application factory and global configuration.

Creates the Flask app, applies security headers (CSP), configures rate limiting
and CSRF protection, loads the strain catalog, registers blueprints and CLI
commands. This file keeps startup/config concerns together and avoids domain
logic here.
"""

from __future__ import annotations
import os
from datetime import datetime

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, request
from flask_wtf.csrf import CSRFError

from .cli import catalog_stats_command, search_strains_command
from .extensions import csrf, limiter
from .routes.api import api_bp
from .routes.web import web_bp
from .services import catalog


def _validate_production_security(app: Flask, cfg_path: str) -> None:
    """
    Validate critical security settings in production environments.

    The session cookie carries each visitor's favorites, comments and ratings,
    so a weak or missing SECRET_KEY would let anyone forge or read that state.

    Raises RuntimeError if production security requirements are not met.

    Checks:
    - SESSION_COOKIE_SECURE must be True (cookies only over HTTPS)
    - SECRET_KEY must be set and strong (>= 32 characters)
    - DEBUG must be False
    - PREFERRED_URL_SCHEME should be "https"
    """
    is_production = "ProdConfig" in cfg_path
    is_test = app.config.get("TESTING", False)

    if not is_production or is_test:
        return

    errors = []

    if not app.config.get("SESSION_COOKIE_SECURE", False):
        errors.append(
            "SESSION_COOKIE_SECURE must be True in production. "
            "Saved favorites and comments travel in the session cookie."
        )

    secret_key = app.config.get("SECRET_KEY", "")
    if not secret_key:
        errors.append(
            "SECRET_KEY is not set. Set FLASK_SECRET_KEY environment variable. "
            "Generate with: python -c 'import secrets; print(secrets.token_hex(32))'"
        )
    elif len(secret_key) < 32:
        errors.append(
            f"SECRET_KEY is too weak ({len(secret_key)} chars). "
            "Must be at least 32 characters for production security."
        )

    if app.config.get("DEBUG", False):
        errors.append("DEBUG must be False in production.")

    if app.config.get("PREFERRED_URL_SCHEME", "http") != "https":
        errors.append(
            "PREFERRED_URL_SCHEME should be 'https' in production. "
            "Set PREFERRED_URL_SCHEME=https environment variable."
        )

    if errors:
        error_msg = "\n\n[ERROR] PRODUCTION SECURITY VALIDATION FAILED:\n\n" + "\n\n".join(f"  * {err}" for err in errors)
        error_msg += "\n\n[WARNING] The application will not start until these security issues are resolved.\n"
        raise RuntimeError(error_msg)

    app.logger.info("[OK] Production security validation passed")


def create_app() -> Flask:
    # Load .env early (for local dev)
    load_dotenv(override=True)

    app = Flask(
        __name__,
        static_folder="static",
        template_folder="templates",
    )

    # Allow APP_CONFIG to override (e.g., strain_scanner.config.DevConfig)
    cfg_path = os.getenv("APP_CONFIG", "strain_scanner.config.ProdConfig")
    try:
        app.config.from_object(cfg_path)
    except (ImportError, AttributeError) as e:
        app.logger.warning(f"Could not load config object {cfg_path}: {e}")

    _validate_production_security(app, cfg_path)

    limiter.init_app(app)
    # The limiter is a module-level singleton; follow the config of the newest app
    limiter.enabled = bool(app.config.get("RATELIMIT_ENABLED", True))

    if not app.secret_key:
        app.secret_key = app.config.get("SECRET_KEY", "")

    csrf.init_app(app)

    catalog.init_catalog(app)

    # ---- Content Security Policy ----
    # data: images are needed for the in-page photo preview
    csp = (
        "default-src 'self'; "
        "script-src 'self'; "
        "style-src 'self'; "
        "img-src 'self' data:; "
        "font-src 'self'; "
        "connect-src 'self'; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'; "
        "form-action 'self'"
    )

    @app.after_request
    def apply_security_headers(resp: Response) -> Response:
        resp.headers["Content-Security-Policy"] = csp
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-XSS-Protection"] = "0"  # CSP supersedes legacy XSS filter
        return resp

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e: CSRFError):
        app.logger.warning(f"CSRF validation failed on {request.path}: {e.description}")
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "error": "CSRF token missing or invalid"}), 400
        return "CSRF token missing or invalid. Reload the page and try again.", 400

    @app.errorhandler(413)
    def handle_too_large(e):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "error": "Request too large"}), 413
        return "Upload too large. Photos must be less than 5MB.", 413

    @app.errorhandler(429)
    def handle_rate_limited(e):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "error": "Too many requests. Slow down and try again."}), 429
        return "Too many requests. Slow down and try again.", 429

    # Blueprints
    app.register_blueprint(web_bp)
    app.register_blueprint(api_bp, url_prefix="/api/v1")

    # CLI
    app.cli.add_command(catalog_stats_command)
    app.cli.add_command(search_strains_command)

    app.jinja_env.globals["now"] = lambda: datetime.now()

    return app
