"""
Per-visitor state: favorites, comments and star ratings.

State lives only in the signed session cookie, so it stays with the browser
and nothing is written server-side. Every setter returns (result, error) like
the rest of the services; the caller decides whether to flash or JSON-encode
the error.

Session layout:
    favorites: ["Blue Dream", ...]          # insertion order
    comments:  {"Blue Dream": "smooth", ...}
    ratings:   {"Blue Dream": 4, ...}
"""

from __future__ import annotations
import json
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app, session

from ..utils.errors import log_warning

FAVORITES_KEY = "favorites"
COMMENTS_KEY = "comments"
RATINGS_KEY = "ratings"

DEFAULT_MAX_BYTES = 3000
QUOTA_ERROR = "Storage is full. Remove some comments or favorites and try again."


def _read_favorites() -> List[str]:
    value = session.get(FAVORITES_KEY)
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _read_comments() -> Dict[str, str]:
    value = session.get(COMMENTS_KEY)
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, str)}


def _read_ratings() -> Dict[str, int]:
    value = session.get(RATINGS_KEY)
    if not isinstance(value, dict):
        return {}
    return {
        k: v for k, v in value.items()
        if isinstance(k, str) and isinstance(v, int) and not isinstance(v, bool) and 1 <= v <= 5
    }


def get_state() -> Dict[str, Any]:
    """Return a copy of the visitor's state; malformed entries read as empty."""
    return {
        FAVORITES_KEY: _read_favorites(),
        COMMENTS_KEY: _read_comments(),
        RATINGS_KEY: _read_ratings(),
    }


def state_for(name: str, state: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """State slice for one strain, as shown on a result card."""
    if state is None:
        state = get_state()
    return {
        "favorite": name in state[FAVORITES_KEY],
        "comment": state[COMMENTS_KEY].get(name, ""),
        "rating": state[RATINGS_KEY].get(name, 0),
    }


def is_favorite(name: str) -> bool:
    return name in _read_favorites()


def _state_size(state: Dict[str, Any]) -> int:
    return len(json.dumps(state, ensure_ascii=False, separators=(",", ":")).encode("utf-8"))


def _commit(key: str, value: Any) -> Optional[str]:
    """
    Write one key unless it grows the state past the quota. Writes that do
    not grow the state are always accepted. Returns an error or None.
    """
    current = get_state()
    candidate = dict(current)
    candidate[key] = value

    max_bytes = int(current_app.config.get("USER_STATE_MAX_BYTES", DEFAULT_MAX_BYTES))
    new_size = _state_size(candidate)
    if new_size > max_bytes and new_size > _state_size(current):
        log_warning(f"User state write refused: {key} would exceed the storage quota")
        return QUOTA_ERROR

    session[key] = value
    session.permanent = True
    return None


def toggle_favorite(name: str) -> Tuple[Optional[bool], Optional[str]]:
    """
    Add the strain to favorites, or remove it if already there.

    Returns:
        (is_favorite_now, error_message)
    """
    favorites = _read_favorites()
    if name in favorites:
        updated = [f for f in favorites if f != name]
    else:
        updated = favorites + [name]

    error = _commit(FAVORITES_KEY, updated)
    if error:
        return None, error
    return name in updated, None


def set_comment(name: str, comment: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Save the comment for a strain. An empty comment removes the entry.

    Returns:
        (saved_comment, error_message)
    """
    comments = _read_comments()
    if comment:
        comments[name] = comment
    else:
        comments.pop(name, None)

    error = _commit(COMMENTS_KEY, comments)
    if error:
        return None, error
    return comment, None


def set_rating(name: str, rating: int) -> Tuple[Optional[int], Optional[str]]:
    """
    Save a 1-5 star rating for a strain.

    Returns:
        (saved_rating, error_message)
    """
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        return None, "Rating must be a whole number from 1 to 5."

    ratings = _read_ratings()
    ratings[name] = rating

    error = _commit(RATINGS_KEY, ratings)
    if error:
        return None, error
    return rating, None


def clear_state() -> None:
    """Forget everything stored for this visitor."""
    for key in (FAVORITES_KEY, COMMENTS_KEY, RATINGS_KEY):
        session.pop(key, None)
