from __future__ import annotations

import uuid
from typing import Any, Optional

from ..core.exceptions import ValidationError


def new_id(prefix: str, *, length: int = 12) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:length]}"


def id_or_new(value: Optional[Any], prefix: str) -> str:
    """Use a caller-supplied string id when given, otherwise generate one."""
    if value is None or value == "":
        return new_id(prefix)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("id must be a non-empty string")
    return value.strip()
