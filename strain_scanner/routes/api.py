"""
Defines JSON endpoints used by the front end.

Endpoints:
- /strains/search: Substring search over the catalog, with per-strain user state
- /strains/<name>: Single strain lookup
- /me/state: Everything stored for this browser
- /me/favorites, /me/comments, /me/ratings: Update one piece of stored state

All responses share the {"success": bool, ...} envelope; failures add an
"error" message that is safe to display.
"""

from __future__ import annotations
from flask import Blueprint, current_app, jsonify, request

from ..extensions import limiter
from ..services import catalog
from ..services import user_state
from ..services.moderation import run_moderation
from ..utils.errors import GENERIC_MESSAGES, sanitize_error
from ..utils.validation import (
    normalize_comment, normalize_query, normalize_strain_name, parse_rating,
)

api_bp = Blueprint("api", __name__)


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _strain_from_body(data):
    """Resolve the "name" field of a JSON body to a catalog record."""
    name = normalize_strain_name(data.get("name") if isinstance(data.get("name"), str) else "")
    if not name:
        return None, _error("Strain name is required", 400)
    strain = catalog.find_strain(name)
    if strain is None:
        return None, _error("Strain not found", 404)
    return strain, None


@api_bp.route("/strains/search", methods=["GET"])
def search_api():
    """
    Search strains by name, flavor or description.

    Query params:
        q: search text (empty matches everything)
        limit: optional, clamped to 1..SEARCH_RESULT_LIMIT

    Example response:
        {
            "success": true,
            "query": "berry",
            "count": 2,
            "results": [{"name": "...", "type_label": "...", "favorite": false, ...}]
        }
    """
    query = normalize_query(request.args.get("q", ""))
    max_limit = int(current_app.config.get("SEARCH_RESULT_LIMIT", catalog.DEFAULT_SEARCH_LIMIT))
    limit = request.args.get("limit", type=int)
    if limit is None:
        limit = max_limit
    limit = max(1, min(limit, max_limit))

    try:
        matches = catalog.search_strains(query, limit=limit)
        state = user_state.get_state()
        results = [
            {**catalog.format_strain(s), **user_state.state_for(s["name"], state)}
            for s in matches
        ]
    except Exception as e:
        return _error(sanitize_error(e, "catalog", "Strain search failed"), 500)

    return jsonify({
        "success": True,
        "query": query,
        "count": len(results),
        "results": results,
    })


@api_bp.route("/strains/<path:name>", methods=["GET"])
def strain_detail(name: str):
    strain = catalog.find_strain(normalize_strain_name(name))
    if strain is None:
        return _error("Strain not found", 404)
    return jsonify({
        "success": True,
        "strain": {**catalog.format_strain(strain), **user_state.state_for(strain["name"])},
    })


@api_bp.route("/me/state", methods=["GET"])
def my_state():
    return jsonify({"success": True, "state": user_state.get_state()})


@api_bp.route("/me/favorites", methods=["POST"])
@limiter.limit(lambda: current_app.config["STATE_WRITE_RATE_LIMIT"])
def toggle_favorite():
    """
    Toggle a favorite.

    Request body (JSON):
        {"name": "Blue Dream"}

    Returns:
        {"success": true, "favorite": true, "favorites": ["Blue Dream"]}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("Invalid request body", 400)

    strain, err = _strain_from_body(data)
    if err:
        return err

    is_fav, error = user_state.toggle_favorite(strain["name"])
    if error:
        return _error(error, 413)

    return jsonify({
        "success": True,
        "favorite": is_fav,
        "favorites": user_state.get_state()[user_state.FAVORITES_KEY],
    })


@api_bp.route("/me/comments", methods=["POST"])
@limiter.limit(lambda: current_app.config["STATE_WRITE_RATE_LIMIT"])
def save_comment():
    """
    Save (or clear, with an empty string) the comment for a strain.

    Request body (JSON):
        {"name": "Blue Dream", "comment": "Great for evenings"}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("Invalid request body", 400)

    strain, err = _strain_from_body(data)
    if err:
        return err

    raw_comment = data.get("comment", "")
    if not isinstance(raw_comment, str):
        return _error(GENERIC_MESSAGES["validation"], 400)
    comment = normalize_comment(raw_comment)

    allowed, reason = run_moderation(comment)
    if not allowed:
        return _error(f"Comment blocked by content policy: {reason}", 400)

    saved, error = user_state.set_comment(strain["name"], comment)
    if error:
        return _error(error, 413)

    return jsonify({"success": True, "comment": saved})


@api_bp.route("/me/ratings", methods=["POST"])
@limiter.limit(lambda: current_app.config["STATE_WRITE_RATE_LIMIT"])
def save_rating():
    """
    Save a star rating for a strain.

    Request body (JSON):
        {"name": "Blue Dream", "rating": 4}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("Invalid request body", 400)

    strain, err = _strain_from_body(data)
    if err:
        return err

    rating, error = parse_rating(data.get("rating"))
    if error:
        return _error(error, 400)

    saved, error = user_state.set_rating(strain["name"], rating)
    if error:
        return _error(error, 413)

    return jsonify({"success": True, "rating": saved})
