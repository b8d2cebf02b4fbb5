from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional

from ..common.validators import require_number
from ..core.exceptions import ValidationError
from .model import WeightProfile

# field -> (label, minimum, maximum, integer)
_NUMERIC_FIELDS: dict[str, tuple[str, Optional[float], Optional[float], bool]] = {
    "actual_attendance": ("Số ngày công thực tế", 0, None, True),
    "required_attendance": ("Số ngày công yêu cầu", 0, None, True),
    "annotation_score": ("Điểm gán nhãn", 0, 100, False),
    "onsite_performance": ("Điểm hiện trường", 1, 5, False),
    "total_inspected": ("Số câu được kiểm tra", 0, None, True),
    "total_errors": ("Số câu lỗi", 0, None, True),
    "deduction_points": ("Điểm trừ", 0, None, False),
    "bonus_points": ("Điểm cộng", 0, None, False),
}

_WEIGHT_FIELDS = ("weight_annotation", "weight_attendance", "weight_onsite", "weight_accuracy")
_TEXT_FIELDS = ("deduction_reason", "bonus_reason", "remarks")

ROW_FIELDS = frozenset(_NUMERIC_FIELDS) | {"deduction_reason", "bonus_reason"}
RECORD_FIELDS = frozenset(_NUMERIC_FIELDS) | frozenset(_WEIGHT_FIELDS) | frozenset(_TEXT_FIELDS)


def clean_number(field: str, value: Any) -> float | int:
    label, minimum, maximum, integer = _NUMERIC_FIELDS[field]
    number = require_number(value, label)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{label} không được nhỏ hơn {minimum:g}")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{label} không được lớn hơn {maximum:g}")
    if integer:
        if number != int(number):
            raise ValidationError(f"{label} phải là số nguyên")
        return int(number)
    return number


def clean_inputs(changes: Mapping[str, Any], *, allowed: frozenset[str]) -> dict[str, Any]:
    """Validate a partial update of scoring inputs; unknown fields are rejected."""
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationError(f"Trường không hợp lệ: {', '.join(unknown)}")

    out: dict[str, Any] = {}
    for field, value in changes.items():
        if field in _NUMERIC_FIELDS:
            out[field] = clean_number(field, value)
        elif field in _WEIGHT_FIELDS:
            weight = require_number(value, "Trọng số")
            if weight < 0:
                raise ValidationError("Trọng số không được âm")
            out[field] = weight
        else:
            out[field] = (str(value).strip() or None) if value is not None else None
    inspected, errors = out.get("total_inspected"), out.get("total_errors")
    if inspected is not None and errors is not None and errors > inspected:
        raise ValidationError("Số câu lỗi không được lớn hơn số câu được kiểm tra")
    return out


def parse_weights(raw: Optional[Mapping[str, Any]]) -> WeightProfile:
    """Build a weight profile from ``{"annotation": .., "attendance": .., ...}``; missing keys keep defaults."""
    if not raw:
        return WeightProfile()
    cleaned = clean_inputs({f"weight_{k}": v for k, v in raw.items()}, allowed=frozenset(_WEIGHT_FIELDS))
    return replace(WeightProfile(), **{k[len("weight_"):]: v for k, v in cleaned.items()})
