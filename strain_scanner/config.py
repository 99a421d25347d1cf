"""
Centralized configuration for all environments.

Select a config by setting:
  APP_CONFIG=strain_scanner.config.DevConfig      # local dev
  APP_CONFIG=strain_scanner.config.ProdConfig     # production (default if unset)
  APP_CONFIG=strain_scanner.config.TestConfig     # pytest

Notes:
- SECRET_KEY is read from FLASK_SECRET_KEY. It also signs the session cookie
  that carries favorites, comments and ratings, so it must be stable.
- Rate limiting uses Flask-Limiter v3 keys (RATELIMIT_*).
"""

from __future__ import annotations
import os
from datetime import timedelta

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_STRAIN_DATA_PATH = os.path.join(_PACKAGE_DIR, "data", "strains.json")


class BaseConfig:
    # Secrets & basics
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "")
    DEBUG = False
    TESTING = False

    # Session cookie doubles as the browser-side store for user state
    PERMANENT_SESSION_LIFETIME = timedelta(days=30)
    SESSION_COOKIE_SECURE = True  # Only send cookies over HTTPS (overridden in dev)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Serialized favorites/comments/ratings must stay under the ~4KB cookie cap
    USER_STATE_MAX_BYTES = int(os.getenv("USER_STATE_MAX_BYTES", "3000"))

    # Catalog
    STRAIN_DATA_PATH = os.getenv("STRAIN_DATA_PATH", DEFAULT_STRAIN_DATA_PATH)
    SEARCH_RESULT_LIMIT = 15
    DESCRIPTION_PREVIEW_LEN = 120

    # Feature flags
    DEBUG_ENDPOINTS_ENABLED = os.getenv("DEBUG_ENDPOINTS_ENABLED", "false").lower() == "true"

    # Flask-Limiter v3
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "120 per minute; 5000 per day")
    RATELIMIT_HEADERS_ENABLED = True

    # Photo preview uploads
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10MB request cap; per-file cap lives in file_upload
    SCAN_RATE_LIMIT = "20 per hour"
    STATE_WRITE_RATE_LIMIT = "60 per minute"

    # Misc
    PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "https")
    SEND_FILE_MAX_AGE_DEFAULT = int(os.getenv("SEND_FILE_MAX_AGE_DEFAULT", "3600"))


class ProdConfig(BaseConfig):
    """Production settings (selected by default if APP_CONFIG is unset)."""
    pass


class DevConfig(BaseConfig):
    """Developer-friendly settings."""
    DEBUG = True
    DEBUG_ENDPOINTS_ENABLED = True
    TEMPLATES_AUTO_RELOAD = True
    SEND_FILE_MAX_AGE_DEFAULT = 0
    PREFERRED_URL_SCHEME = "http"
    # Allow cookies over HTTP in dev
    SESSION_COOKIE_SECURE = False
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-only-not-secret")


class TestConfig(BaseConfig):
    """CI/pytest settings."""
    TESTING = True
    DEBUG = True
    SECRET_KEY = "test-secret-key-for-testing-only"
    SESSION_COOKIE_SECURE = False
    PREFERRED_URL_SCHEME = "http"
    # Usually disable the limiter in tests to avoid flakiness
    RATELIMIT_ENABLED = False
    TEMPLATES_AUTO_RELOAD = True
    SEND_FILE_MAX_AGE_DEFAULT = 0
