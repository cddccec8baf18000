"""Field checks shared by the API schemas and the bulk importer."""
import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
EMAIL_MAX_LENGTH = 254


def is_valid_email(value: str) -> bool:
    return len(value) <= EMAIL_MAX_LENGTH and EMAIL_PATTERN.match(value) is not None


def clean_email(value: Optional[str]) -> Optional[str]:
    """Blank becomes None; anything else must be a valid address (lower-cased)."""
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not is_valid_email(value):
        raise ValueError("כתובת אימייל לא תקינה")
    return value.lower()
