from __future__ import annotations

from datetime import time

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_user_id(value) -> int:
    try:
        user_id = int(value)
    except (TypeError, ValueError):
        raise ValidationError("user_id must be an integer")
    if user_id <= 0:
        raise ValidationError("user_id must be positive")
    return user_id


def require_hour_minute(hour, minute) -> time:
    try:
        h = int(hour)
        m = int(minute)
    except (TypeError, ValueError):
        raise ValidationError("End time must be given as hour and minute")
    if not 0 <= h <= 23 or not 0 <= m <= 59:
        raise ValidationError(f"Invalid end time {hour}:{minute}")
    return time(hour=h, minute=m)
