# backend/courtbook/utils/phone.py
"""
Phone canonicalisation to E.164.

Customers are keyed by phone, so every number is reduced to one form before
lookup or storage:

- ``+`` followed by 8-15 digits is kept as is
- 10 national digits get the default country code
- 11-15 bare digits are taken as already international
- anything else is rejected
"""

import re
from typing import Optional

from ..core.exceptions import ValidationException

_FORMATTING = re.compile(r"[\s\-().\/]")
_DIGITS = re.compile(r"\d+")


def normalize_phone(raw: Optional[str], default_country_code: str = "52") -> Optional[str]:
    """
    Return the E.164 form of ``raw`` or None when it cannot be canonicalised.

    >>> normalize_phone("(55) 1234-5678")
    '+525512345678'
    >>> normalize_phone("+1 415 555 0100")
    '+14155550100'
    """
    cleaned = _FORMATTING.sub("", raw or "")
    if not cleaned:
        return None

    if cleaned.startswith("+"):
        digits = cleaned[1:]
        if _DIGITS.fullmatch(digits) and 8 <= len(digits) <= 15:
            return f"+{digits}"
        return None

    if not _DIGITS.fullmatch(cleaned):
        return None
    if len(cleaned) == 10:
        return f"+{default_country_code}{cleaned}"
    if 11 <= len(cleaned) <= 15:
        return f"+{cleaned}"
    return None


def require_e164(raw: Optional[str], default_country_code: str = "52") -> str:
    """Canonicalise ``raw`` or raise a ValidationException naming the field."""
    phone = normalize_phone(raw, default_country_code)
    if phone is None:
        raise ValidationException(
            "Invalid phone number. Use 10 digits or international format (+country code).",
            code="INVALID_PHONE",
            details={"field": "phone"},
        )
    return phone


def digits_only(value: str) -> str:
    return "".join(ch for ch in value if ch.isdigit())
