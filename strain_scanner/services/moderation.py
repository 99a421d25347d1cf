"""
Lightweight text moderation.

Checks comment text and returns (allowed, reason). If blocked, 'reason' is a
short message suitable for UI display. Strain names and descriptions are full
of words like "Killer" or "Bomb", so the blocklist matches whole words only
and sticks to terms that never appear in strain vocabulary.
"""

from __future__ import annotations
import re
from typing import Tuple

_BLOCKLIST = {
    "suicide", "murder", "terror", "nsfw", "nazi",
}

_WORD_RE = re.compile(r"[a-z]+")


def run_moderation(text: str) -> Tuple[bool, str | None]:
    """
    Returns (allowed, reason). Lowercase whole-word match against a tiny
    blocklist.
    """
    words = set(_WORD_RE.findall((text or "").lower()))
    for term in sorted(_BLOCKLIST):
        if term in words:
            return False, f"contains disallowed content: “{term}”"
    return True, None
