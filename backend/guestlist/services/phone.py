"""Phone normalization to the canonical international form.

Digit count is not validated: malformed numbers come out structurally
normalized, never rejected.
"""
import re
from typing import Optional

from guestlist.config import settings

_NON_DIGIT = re.compile(r"\D")


def normalize_phone(phone: Optional[str], country_code: Optional[str] = None) -> Optional[str]:
    """Normalize a local-format phone to +<country><number>.

    050-123-4567 -> +972501234567, 972501234567 -> +972501234567.
    Returns None for empty input.
    """
    if not phone:
        return None
    country_code = country_code or settings.DEFAULT_COUNTRY_CODE
    digits = _NON_DIGIT.sub("", str(phone))
    if not digits:
        return None
    if digits.startswith(country_code):
        return f"+{digits}"
    if digits.startswith("0"):
        return f"+{country_code}{digits[1:]}"
    return f"+{digits}"
