"""
UI routes and request flow.

Serves the scanner page, runs searches, and handles the small form posts that
update favorites, comments and ratings. Writes follow post/redirect/get so a
refresh never re-submits; the page script upgrades the same forms to JSON
calls against the API blueprint when JavaScript is available.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from flask import (
    Blueprint, abort, current_app, flash, redirect, render_template, request, url_for,
)

from ..extensions import limiter
from ..services import catalog
from ..services import user_state
from ..services.moderation import run_moderation
from ..utils.errors import sanitize_error
from ..utils.file_upload import build_preview_data_url, validate_upload_file
from ..utils.validation import (
    display_sanitize_short, normalize_comment, normalize_query, normalize_strain_name, parse_rating,
)

web_bp = Blueprint("web", __name__)


def _build_cards(strains: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Pair each formatted strain with the visitor's state for it."""
    state = user_state.get_state()
    return [
        {"strain": catalog.format_strain(s), "state": user_state.state_for(s["name"], state)}
        for s in strains
    ]


def _render_index(query: Optional[str], preview_url: Optional[str] = None, status: int = 200):
    results = None
    if query is not None:
        results = _build_cards(catalog.search_strains(query))
    return render_template(
        "index.html",
        query=query,
        results=results,
        preview_url=preview_url,
        catalog_size=len(catalog.get_strains()),
    ), status


def _redirect_back():
    """Send the visitor back to the page the form was posted from."""
    if request.form.get("return_to") == "favorites":
        return redirect(url_for("web.favorites"))
    if "q" in request.form:
        return redirect(url_for("web.index", q=normalize_query(request.form.get("q"))))
    return redirect(url_for("web.index"))


def _posted_strain() -> Optional[Dict[str, Any]]:
    name = normalize_strain_name(request.form.get("name"))
    strain = catalog.find_strain(name)
    if strain is None:
        flash("Strain not found.", "error")
    return strain


@web_bp.route("/healthz")
@limiter.exempt
def healthz():
    """Simple health endpoint to verify the server responds."""
    return "OK", 200


@web_bp.route("/debug")
def debug_info():
    """Lightweight status snapshot for troubleshooting (DEBUG_ENDPOINTS_ENABLED only)."""
    if not current_app.config.get("DEBUG_ENDPOINTS_ENABLED"):
        abort(404)
    state = user_state.get_state()
    return {
        "catalog": catalog.catalog_stats(),
        "data_path": current_app.config.get("STRAIN_DATA_PATH"),
        "search_limit": current_app.config.get("SEARCH_RESULT_LIMIT"),
        "flask_secret_key_set": bool(current_app.secret_key),
        "state_counts": {key: len(value) for key, value in state.items()},
    }


@web_bp.route("/", methods=["GET"])
@limiter.limit("120 per minute")
def index():
    """
    Render the scanner page. A `q` parameter (even an empty one) means the
    search button was pressed; without it only the form is shown.
    """
    query = normalize_query(request.args["q"]) if "q" in request.args else None
    return _render_index(query)


@web_bp.route("/favorites", methods=["GET"])
def favorites():
    """List favorite strains in the order they were added."""
    names = user_state.get_state()[user_state.FAVORITES_KEY]
    strains = [s for s in (catalog.find_strain(n) for n in names) if s is not None]
    return render_template("favorites.html", results=_build_cards(strains))


@web_bp.route("/strains/favorite", methods=["POST"])
@limiter.limit(lambda: current_app.config["STATE_WRITE_RATE_LIMIT"])
def toggle_favorite():
    strain = _posted_strain()
    if strain is not None:
        _, error = user_state.toggle_favorite(strain["name"])
        if error:
            flash(error, "error")
    return _redirect_back()


@web_bp.route("/strains/comment", methods=["POST"])
@limiter.limit(lambda: current_app.config["STATE_WRITE_RATE_LIMIT"])
def save_comment():
    strain = _posted_strain()
    if strain is None:
        return _redirect_back()

    comment = normalize_comment(request.form.get("comment"))
    allowed, reason = run_moderation(comment)
    if not allowed:
        flash(display_sanitize_short(f"Comment blocked by content policy: {reason}"), "error")
        return _redirect_back()

    _, error = user_state.set_comment(strain["name"], comment)
    if error:
        flash(error, "error")
    else:
        flash("Comment saved." if comment else "Comment removed.", "success")
    return _redirect_back()


@web_bp.route("/strains/rating", methods=["POST"])
@limiter.limit(lambda: current_app.config["STATE_WRITE_RATE_LIMIT"])
def save_rating():
    strain = _posted_strain()
    if strain is None:
        return _redirect_back()

    rating, error = parse_rating(request.form.get("rating"))
    if error is None:
        _, error = user_state.set_rating(strain["name"], rating)
    if error:
        flash(error, "error")
    return _redirect_back()


@web_bp.route("/scan", methods=["POST"])
@limiter.limit(lambda: current_app.config["SCAN_RATE_LIMIT"])
def scan():
    """
    Show a preview of a captured or uploaded plant photo. The image is not
    stored; it is only echoed back as a downscaled data URL.
    """
    query = normalize_query(request.form["q"]) if "q" in request.form else None

    is_valid, error, file_bytes = validate_upload_file(request.files.get("photo"))
    if error:
        flash(error, "error")
        return _render_index(query, status=400)
    if not is_valid:
        flash("Choose a photo to preview.", "error")
        return _render_index(query, status=400)

    try:
        preview_url = build_preview_data_url(file_bytes)
    except Exception as e:
        flash(sanitize_error(e, "upload", "Photo preview failed"), "error")
        return _render_index(query, status=400)

    return _render_index(query, preview_url=preview_url)


@web_bp.route("/my-data/clear", methods=["POST"])
@limiter.exempt
def clear_my_data():
    """Wipe favorites, comments and ratings for this browser."""
    user_state.clear_state()
    flash("Your favorites, comments and ratings were cleared.", "success")
    return redirect(url_for("web.index"))
