from __future__ import annotations

import re
from typing import Any, Iterable

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: str, field_name: str = "email") -> str:
    email = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"{field_name} is not a valid address")
    return email


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if n <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return n


def require_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in {"true", "false", "1", "0"}:
        return value.strip().lower() in {"true", "1"}
    raise ValidationError(f"{field_name} must be a boolean")


def parse_id_list(value: str | Iterable[Any] | None, field_name: str = "ids") -> list[int]:
    """Accept "1,2,3" (query string) or a JSON list; empty input gives []."""
    if value is None:
        return []
    if isinstance(value, str):
        parts = [p for p in (s.strip() for s in value.split(",")) if p]
    else:
        parts = list(value)
    return [require_positive_int(p, field_name) for p in parts]
