"""Shared validation utilities"""

import re
import uuid
from typing import Optional

# Senegal
DEFAULT_COUNTRY_CODE = "221"


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def format_phone_number(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a West African phone number to international format.

    Numbers without a leading '+' get the default country code:
    - 221XXXXXXXXX (12 digits) -> +221XXXXXXXXX
    - 7XXXXXXXX (9 digit mobile) -> +2217XXXXXXXX
    - any other 8-12 digit number -> +221 prefix

    Returns:
        The formatted number, or None when it cannot be a valid number
        (final length must be 10-15 characters including '+').
    """
    if not phone:
        return None

    cleaned = re.sub(r"[^\d+]", "", phone)

    if not cleaned.startswith("+"):
        if cleaned.startswith(DEFAULT_COUNTRY_CODE) and len(cleaned) == 12:
            cleaned = f"+{cleaned}"
        elif cleaned.startswith("7") and len(cleaned) == 9:
            cleaned = f"+{DEFAULT_COUNTRY_CODE}{cleaned}"
        elif 8 <= len(cleaned) <= 12:
            cleaned = f"+{DEFAULT_COUNTRY_CODE}{cleaned}"
        else:
            return None

    if len(cleaned) < 10 or len(cleaned) > 15:
        return None

    return cleaned


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number for storage.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    formatted = format_phone_number(phone)
    if not formatted:
        raise ValueError("Invalid phone number format")
    return formatted


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
        raise ValueError("Invalid email format")
    return email


def validate_non_negative(value: Optional[float], field: str = "Amount") -> Optional[float]:
    """Monetary amounts and rates cannot be negative"""
    if value is not None and value < 0:
        raise ValueError(f"{field} must be greater than or equal to 0")
    return value
