"""
Input sanitization for signup fields.
"""
import re

EMAIL_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 50


def sanitize_text(text: str, max_length: int | None = 5000) -> str:
    """Strip control characters and enforce length limit (None keeps the full text)."""
    if not text:
        return ""
    if max_length is not None:
        text = text[:max_length]
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)
    return text.strip()


def validate_email(value) -> str | None:
    """Minimal email check: a non-empty string containing "@". Returns the trimmed email or None."""
    if not value or not isinstance(value, str):
        return None
    email = value.strip()
    if "@" not in email or len(email) > EMAIL_MAX_LENGTH:
        return None
    return email


def clean_phone(value) -> str | None:
    """Only a missing/null phone is None; blank strings are kept so they overwrite a stored phone."""
    if value is None or isinstance(value, (dict, list)):
        return None
    return sanitize_text(str(value), max_length=None)
