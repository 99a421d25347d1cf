"""
Strain catalog service.

Loads the static strain dataset (a flat JSON array) once per app and answers
lookups and searches against it. The dataset is a few thousand records, so
search is a straight scan in catalog order; there is no index.

Record shape:
    {
        "name": "Blue Dream",                        # required, str
        "type": "Hybrid",                            # optional
        "effects": {"relaxed": "45%", ...},          # optional
        "flavors": ["Blueberry", "Sweet", ...],      # optional
        "description": "..."                         # optional
    }
"""

from __future__ import annotations
import json
import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

EXTENSION_KEY = "strain_catalog"

DEFAULT_SEARCH_LIMIT = 15
DEFAULT_PREVIEW_LEN = 120

UNKNOWN_TYPE_LABEL = "Unknown Type"
MISSING_LABEL = "N/A"
NO_DESCRIPTION_LABEL = "No description available."


def _safe_log_error(message: str) -> None:
    """Safely log an error, handling cases where no app context exists."""
    if has_app_context():
        current_app.logger.error(message)
    else:
        logger.error(message)


def load_strains(path: str) -> List[Dict[str, Any]]:
    """
    Read the strain dataset from disk.

    Only entries that are objects with a string "name" are kept; a top-level
    value that is not a list yields an empty catalog. A missing or malformed
    file is logged and also yields an empty catalog so the app can still
    serve pages.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            parsed = json.load(f)
    except FileNotFoundError:
        _safe_log_error(f"Strain data file not found: {path}")
        return []
    except (OSError, ValueError) as e:
        _safe_log_error(f"Failed to load strain data from {path}: {e}")
        return []

    if not isinstance(parsed, list):
        _safe_log_error(f"Strain data in {path} is not a JSON array; catalog is empty")
        return []

    return [s for s in parsed if isinstance(s, dict) and isinstance(s.get("name"), str)]


def init_catalog(app) -> None:
    """
    Load the catalog from STRAIN_DATA_PATH and attach it to the app.

    Call this from the Flask app factory.
    """
    path = app.config.get("STRAIN_DATA_PATH", "")
    strains = load_strains(path)
    app.extensions[EXTENSION_KEY] = strains
    if strains:
        app.logger.info(f"Loaded {len(strains)} strains from {path}")
    else:
        app.logger.warning(f"Strain catalog is empty (source: {path})")


def get_strains() -> List[Dict[str, Any]]:
    """Get the catalog loaded for the current app (empty outside an app context)."""
    if not has_app_context():
        return []
    return current_app.extensions.get(EXTENSION_KEY, [])


def find_strain(name: str, strains: Optional[List[Dict[str, Any]]] = None) -> Optional[Dict[str, Any]]:
    """Exact-name lookup; the first record with that name wins."""
    if not name:
        return None
    if strains is None:
        strains = get_strains()
    for strain in strains:
        if strain.get("name") == name:
            return strain
    return None


def _matches(strain: Dict[str, Any], needle: str) -> bool:
    name = strain.get("name")
    if isinstance(name, str) and needle in name.lower():
        return True

    flavors = strain.get("flavors")
    if isinstance(flavors, list):
        if any(isinstance(f, str) and needle in f.lower() for f in flavors):
            return True

    description = strain.get("description")
    return isinstance(description, str) and needle in description.lower()


def _search_limit() -> int:
    if has_app_context():
        return int(current_app.config.get("SEARCH_RESULT_LIMIT", DEFAULT_SEARCH_LIMIT))
    return DEFAULT_SEARCH_LIMIT


def search_strains(
    query: str,
    strains: Optional[List[Dict[str, Any]]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Case-insensitive substring search over name, flavors and description.

    Results keep catalog order and stop at `limit` matches (SEARCH_RESULT_LIMIT
    by default). An empty query matches every record.
    """
    if strains is None:
        strains = get_strains()
    if limit is None:
        limit = _search_limit()
    if limit <= 0:
        return []

    needle = (query or "").lower()
    results = []
    for strain in strains:
        if _matches(strain, needle):
            results.append(strain)
            if len(results) >= limit:
                break
    return results


def format_strain(strain: Dict[str, Any], preview_len: Optional[int] = None) -> Dict[str, Any]:
    """
    Build the display fields used by the result cards and the JSON API.

    Returns a new dict; the catalog record is left untouched.
    """
    if preview_len is None:
        preview_len = (
            int(current_app.config.get("DESCRIPTION_PREVIEW_LEN", DEFAULT_PREVIEW_LEN))
            if has_app_context() else DEFAULT_PREVIEW_LEN
        )

    strain_type = strain.get("type")
    flavors = strain.get("flavors")
    effects = strain.get("effects")
    description = strain.get("description")

    if isinstance(flavors, list):
        flavors_label = ", ".join(str(f) for f in flavors)
    else:
        flavors_label = MISSING_LABEL

    if isinstance(effects, dict):
        effects_label = ", ".join(f"{effect} ({value})" for effect, value in effects.items())
    else:
        effects_label = MISSING_LABEL

    preview = description[:preview_len] if isinstance(description, str) else ""

    return {
        "name": strain["name"],
        "type": strain_type if isinstance(strain_type, str) else None,
        "flavors": list(flavors) if isinstance(flavors, list) else [],
        "effects": dict(effects) if isinstance(effects, dict) else {},
        "description": description if isinstance(description, str) else None,
        "type_label": strain_type if isinstance(strain_type, str) and strain_type else UNKNOWN_TYPE_LABEL,
        "flavors_label": flavors_label,
        "effects_label": effects_label,
        "description_preview": preview or NO_DESCRIPTION_LABEL,
    }


def catalog_stats(strains: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Summary numbers for the CLI and the debug endpoint."""
    if strains is None:
        strains = get_strains()

    types = Counter(
        s["type"] if isinstance(s.get("type"), str) and s.get("type") else UNKNOWN_TYPE_LABEL
        for s in strains
    )
    flavors = {
        f.lower()
        for s in strains
        if isinstance(s.get("flavors"), list)
        for f in s["flavors"]
        if isinstance(f, str)
    }
    return {
        "total": len(strains),
        "by_type": dict(types.most_common()),
        "distinct_flavors": len(flavors),
    }
