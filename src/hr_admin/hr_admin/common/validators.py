from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_length(value: Optional[str], field_name: str, min_len: int, max_len: int) -> str:
    v = (value or "").strip()
    if len(v) < min_len or len(v) > max_len:
        raise ValidationError(f"{field_name} must be between {min_len} and {max_len} characters")
    return v


def require_int_range(value: object, field_name: str, low: int, high: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if number < low or number > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number
