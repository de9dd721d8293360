# File: src/stockpilot/core/validators.py
"""Reusable validation utilities for input sanitization."""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from stockpilot.utils.datetime import today_local

# Accepted spellings from the POS terminals mapped to stored payment methods
PAYMENT_METHOD_SYNONYMS = {
    "cash": "cash",
    "walk-in": "cash",
    "walk_in": "cash",
    "gcash": "gcash",
    "grabf": "grabfood",
    "grabfood": "grabfood",
    "foodp": "foodpanda",
    "foodpanda": "foodpanda",
}


def validate_currency(
    value: Decimal | float | str, max_value: Decimal = Decimal("9999999999.99")
) -> Decimal:
    """
    Validate currency input.

    Args:
        value: Currency value to validate
        max_value: Maximum allowed value (default: 9,999,999,999.99 to match NUMERIC(12, 2))

    Returns:
        Validated Decimal with max 2 decimal places

    Raises:
        ValueError: If value is negative, exceeds max, or has >2 decimals
    """
    try:
        decimal_value = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid currency format: {value}") from e

    if not decimal_value.is_finite():
        raise ValueError(f"Invalid currency format: {value}")

    if decimal_value < 0:
        raise ValueError("Currency value cannot be negative")

    if decimal_value > max_value:
        raise ValueError(f"Currency value exceeds maximum allowed: {max_value}")

    if decimal_value.as_tuple().exponent < -2:
        raise ValueError("Currency value cannot have more than 2 decimal places")

    return decimal_value


def normalize_payment_method(value: str) -> str:
    """Map terminal spellings (grabf, foodp, ...) to a stored payment method."""
    key = value.strip().lower() if isinstance(value, str) else ""
    if key not in PAYMENT_METHOD_SYNONYMS:
        allowed = ", ".join(sorted(set(PAYMENT_METHOD_SYNONYMS.values())))
        raise ValueError(f"Unknown payment method '{value}' (allowed: {allowed})")
    return PAYMENT_METHOD_SYNONYMS[key]


def validate_no_future_date(value: date, field_name: str = "Date") -> date:
    """
    Ensure date is not in the future.

    Args:
        value: Date to validate
        field_name: Name for error messages

    Returns:
        Validated date

    Raises:
        ValueError: If date is in the future
    """
    if value > today_local():
        raise ValueError(f"{field_name} cannot be in the future")
    return value


def sanitize_html(value: str | None) -> str | None:
    """
    Strip/escape HTML tags to prevent XSS.

    Args:
        value: Text that may contain HTML

    Returns:
        Sanitized text or None if empty
    """
    if not value:
        return None

    # Remove all HTML tags
    cleaned = re.sub(r"<[^>]+>", "", value)

    # Escape remaining special chars
    cleaned = (
        cleaned.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )

    return cleaned.strip() if cleaned.strip() else None


def validate_name(value: str, field_name: str = "Name", max_length: int = 255) -> str:
    """Require a non-empty, tag-free display name."""
    cleaned = re.sub(r"<[^>]+>", "", value or "").strip()
    if not cleaned:
        raise ValueError(f"{field_name} cannot be empty")
    if len(cleaned) > max_length:
        raise ValueError(f"{field_name} cannot exceed {max_length} characters")
    return cleaned
