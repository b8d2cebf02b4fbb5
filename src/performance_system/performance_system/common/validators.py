from __future__ import annotations

import math
import re

from ..core.exceptions import ValidationError

_PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} không hợp lệ")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} tối thiểu {min_len} ký tự")
    return value


def require_period(value: str) -> str:
    """Validate a ``YYYY-MM`` period string."""
    period = (value or "").strip()
    if not _PERIOD_RE.match(period):
        raise ValidationError(f"Kỳ đánh giá không hợp lệ (YYYY-MM): {value!r}")
    return period


def require_number(value, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} phải là số")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} phải là số")
    return number
