import re
from typing import Optional

from underwraps.core.errors import InvalidInput

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CONTROL_CHARS_RE = re.compile(r"[\x00-\x1F\x7F]")


def is_uuid(value: Optional[str]) -> bool:
    return bool(value) and UUID_RE.match(value) is not None


def ensure_uuid(value: Optional[str], field: str) -> str:
    if not is_uuid(value):
        raise InvalidInput(f"Invalid {field} format")
    return value


def sanitize_name(value: str) -> str:
    """Strip control characters and surrounding whitespace."""
    return CONTROL_CHARS_RE.sub("", value or "").strip()


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and len(value) <= 255 and EMAIL_RE.match(value) is not None
