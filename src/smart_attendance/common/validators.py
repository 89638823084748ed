from __future__ import annotations

from datetime import datetime
from typing import Any, List

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_iso_date(value: Any, field_name: str) -> str:
    """Validate a YYYY-MM-DD string and return it unchanged."""
    v = require_non_empty(value, field_name)
    try:
        datetime.strptime(v, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")
    return v


def require_string_list(value: Any, message: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(message)
    return list(value)


def optional_bool(value: Any, field_name: str, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be true or false")


def optional_non_negative_int(value: Any, field_name: str, default: int = 0) -> int:
    if value is None:
        return default
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{field_name} must be a non-negative integer")
    return value


def optional_string(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value.strip()
