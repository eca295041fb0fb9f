"""Sanitization of free-text fields on uploaded survey records."""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_WHITESPACE = re.compile(r"\s+")

NAME_MAX_LENGTH = 200
EMAIL_MAX_LENGTH = 320


def sanitize_text(text: object, max_length: int = 500) -> str | None:
    """
    Clean a free-text record field such as a respondent name.

    Control characters are dropped, line breaks and tabs from spreadsheet
    cells collapse to single spaces, and long values are truncated with
    "...". Blank values become None so they read as missing.

    Args:
        text: Raw field value (may be None or a non-string from loose uploads)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text, or None when nothing is left
    """
    if text is None:
        return None

    cleaned = _WHITESPACE.sub(" ", _CONTROL_CHARS.sub("", str(text))).strip()
    if not cleaned:
        return None
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length] + "..."
    return cleaned


def sanitize_email(email: object) -> str | None:
    """Normalise an email used to link a respondent's observations across dates."""
    cleaned = sanitize_text(email, max_length=EMAIL_MAX_LENGTH)
    if cleaned is None:
        return None
    return cleaned.replace(" ", "").lower()


def sanitize_date(value: object) -> str | None:
    # Kept as text; parsing happens in the historical analysis
    return sanitize_text(value, max_length=64)
