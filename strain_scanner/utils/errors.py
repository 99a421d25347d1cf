"""
Error sanitization and logging helpers.

Routes call sanitize_error() inside their except blocks: the real exception is
logged server-side and the caller gets a generic message that is safe to show
in the page or a JSON body.
"""

from __future__ import annotations
import logging
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

GENERIC_MESSAGES = {
    "catalog": "The strain catalog is unavailable right now. Please try again later.",
    "storage": "Your saved data could not be updated. Please try again.",
    "upload": "The photo could not be processed. Please try another image.",
    "validation": "Invalid input. Please check your entry and try again.",
    "default": "Something went wrong. Please try again.",
}


def _log(level: int, message: str, exc_info: bool = False) -> None:
    """Log through the app logger when available, module logger otherwise."""
    if has_app_context():
        current_app.logger.log(level, message, exc_info=exc_info)
    else:
        logger.log(level, message, exc_info=exc_info)


def log_warning(message: str) -> None:
    _log(logging.WARNING, message)


def sanitize_error(error: Exception, category: str = "default", context: str | None = None) -> str:
    """
    Log the full exception and return a user-safe message.

    Args:
        error: The caught exception
        category: Key into GENERIC_MESSAGES
        context: Short description of the failed operation, used in the log line

    Returns:
        Generic message for the given category
    """
    prefix = f"{context}: " if context else ""
    _log(logging.ERROR, f"{prefix}{type(error).__name__}: {error}", exc_info=True)
    return GENERIC_MESSAGES.get(category, GENERIC_MESSAGES["default"])
