"""Data normalization utilities for consistent data quality."""

import re
from typing import Optional


E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize phone to E.164 format (+15551234567).

    Accepts:
    - 10 digits: 5551234567 → +15551234567
    - 11 digits starting with 1: 15551234567 → +15551234567
    - Already E.164 (any country code): +442071234567 → +442071234567

    Raises:
        ValueError: If phone cannot be expressed as E.164
    """
    if not phone:
        return None

    cleaned = phone.strip()
    if cleaned.startswith("+"):
        candidate = "+" + re.sub(r"\D", "", cleaned[1:])
        if E164_PATTERN.match(candidate):
            return candidate
    else:
        digits = re.sub(r"\D", "", cleaned)
        if len(digits) == 10:
            return f"+1{digits}"
        elif len(digits) == 11 and digits.startswith("1"):
            return f"+{digits}"

    raise ValueError(f"Invalid phone number '{phone}'. Use E.164 format (e.g., +15551234567).")


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Normalize email to lowercase."""
    if not email:
        return None
    return email.strip().lower()


def normalize_name(name: Optional[str]) -> Optional[str]:
    """Strip whitespace and collapse multiple spaces."""
    if not name:
        return None
    return " ".join(name.split())


def normalize_search_text(value: Optional[str]) -> Optional[str]:
    """Lowercase and collapse whitespace for search matching."""
    if not value:
        return None
    normalized = " ".join(value.lower().split())
    return normalized or None


def validate_hhmm(value: str) -> str:
    """Validate a 24-hour HH:MM string."""
    if not TIME_PATTERN.match(value):
        raise ValueError(f"Invalid time '{value}'. Use HH:MM (24-hour).")
    return value
