"""Best-effort cleanup of free-text inquiry messages for display.

Older records carry messages mangled at submission time: URL-encoded form
bodies, request logs pasted into the field, or keyboard mash. This module
only decides what to *show*; stored records are never rewritten.
"""

import logging
import re
from urllib.parse import unquote_plus

logger = logging.getLogger(__name__)

MAX_DISPLAY_LENGTH = 300

NO_MESSAGE = "No message provided"
SYSTEM_LOG_MESSAGE = (
    "This appears to be system log data rather than a customer message. "
    "Please check the original form submission."
)
CORRUPTED_MESSAGE = (
    "This message appears to be corrupted during form submission. "
    "Please contact the customer directly for their inquiry details."
)
ENCODED_MESSAGE = (
    "Message content appears to be corrupted or encoded. "
    "Please contact the customer directly for their inquiry."
)
UNDISPLAYABLE_MESSAGE = "Unable to display message. Please contact customer directly."

_HTTP_MARKERS = ("HTTP/1.1", "GET /uploads/", "Mozilla/")
_KNOWN_GARBAGE = "szdcfvxbgcnvhmtj"
_MASH_PATTERN = re.compile(r"[a-z,]{30,}")
_LETTER_RUN_PATTERN = re.compile(r"[a-z]{15,}", re.IGNORECASE)
_VOWEL_PATTERN = re.compile(r"[aeiou]", re.IGNORECASE)
_WHITESPACE_PATTERN = re.compile(r"\s")
_BAD_ESCAPE_PATTERN = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize_message(message: str | None) -> str:
    """Return the text to display for a stored inquiry message."""
    if not message:
        return NO_MESSAGE
    try:
        return _normalize(message)
    except (UnicodeDecodeError, ValueError) as exc:
        logger.debug("Could not decode inquiry message: %s", exc)
        return UNDISPLAYABLE_MESSAGE


def _normalize(message: str) -> str:
    if any(marker in message for marker in _HTTP_MARKERS):
        return SYSTEM_LOG_MESSAGE

    if _KNOWN_GARBAGE in message or _MASH_PATTERN.fullmatch(message):
        return CORRUPTED_MESSAGE

    if "%" in message or "+" in message:
        decoded = _url_decode(message)
        if len(decoded) > 10 and decoded != message and "HTTP" not in decoded:
            return _truncate(decoded)

    if "," in message and len(message) > 50:
        for part in message.split(","):
            candidate = part.strip()
            if _is_meaningful(candidate):
                return _truncate(candidate)

    if len(message) > 100 and not _WHITESPACE_PATTERN.search(message):
        return ENCODED_MESSAGE

    return _truncate(message)


def _url_decode(text: str) -> str:
    """Form-decode *text*; malformed escapes raise ValueError."""
    if _BAD_ESCAPE_PATTERN.search(text):
        raise ValueError("malformed percent-escape")
    return unquote_plus(text, errors="strict")


def _is_meaningful(part: str) -> bool:
    return (
        3 < len(part) < 200
        and "undefined" not in part
        and "HTTP" not in part
        and not _LETTER_RUN_PATTERN.fullmatch(part)
        and _VOWEL_PATTERN.search(part) is not None
    )


def _truncate(text: str) -> str:
    if len(text) > MAX_DISPLAY_LENGTH:
        return text[:MAX_DISPLAY_LENGTH] + "..."
    return text
