"""
Input validation and normalization.

Trims and bounds field lengths, strips control characters while allowing
natural punctuation, and parses star ratings. Everything that ends up in the
session cookie or in a rendered page passes through here first.
"""

from __future__ import annotations
import html
import re
from typing import Any, Tuple

MAX_QUERY_LEN = 80
MAX_NAME_LEN = 120
MAX_COMMENT_LEN = 500

MIN_RATING = 1
MAX_RATING = 5

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_ALL_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")


def normalize_query(text: str | None) -> str:
    """
    Search box input:
    - strip & bound length
    - remove control chars (including newlines)
    - collapse repeated whitespace
    """
    t = (text or "").strip()
    if not t:
        return ""
    t = t[:MAX_QUERY_LEN]
    t = _ALL_CONTROL_CHARS.sub("", t)
    t = re.sub(r"\s{2,}", " ", t)
    return t


def normalize_strain_name(text: str | None) -> str:
    """Strain names are looked up verbatim; only trim and bound them."""
    t = (text or "").strip()
    t = t[:MAX_NAME_LEN]
    return _ALL_CONTROL_CHARS.sub("", t)


def normalize_comment(text: str | None) -> str:
    """
    Comment field is free text:
    - strip & bound length
    - remove control chars only; newlines and tabs stay
    """
    t = (text or "").strip()
    if not t:
        return ""
    t = t[:MAX_COMMENT_LEN]
    return _CONTROL_CHARS.sub("", t)


def parse_rating(value: Any) -> Tuple[int | None, str | None]:
    """
    Returns (rating, error_message). Accepts ints and numeric strings in
    MIN_RATING..MAX_RATING; bools and fractional values are rejected.
    """
    if isinstance(value, bool) or value is None:
        return None, "Rating must be a whole number from 1 to 5."
    if isinstance(value, float):
        if not value.is_integer():
            return None, "Rating must be a whole number from 1 to 5."
        value = int(value)
    try:
        rating = int(str(value).strip())
    except (TypeError, ValueError):
        return None, "Rating must be a whole number from 1 to 5."
    if rating < MIN_RATING or rating > MAX_RATING:
        return None, "Rating must be a whole number from 1 to 5."
    return rating, None


def display_sanitize_short(text: str) -> str:
    """
    Short UI messages are HTML-escaped and truncated to avoid layout breaks.
    Use this only for brief notices surfaced to the page.
    """
    if not text:
        return ""
    t = html.escape(text)
    return (t[:240] + "…") if len(t) > 240 else t
