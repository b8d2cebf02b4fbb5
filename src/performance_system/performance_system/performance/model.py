from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.constants import (
    DEFAULT_WEIGHT_ACCURACY,
    DEFAULT_WEIGHT_ANNOTATION,
    DEFAULT_WEIGHT_ATTENDANCE,
    DEFAULT_WEIGHT_ONSITE,
)


@dataclass(frozen=True)
class WeightProfile:
    """Percentage weights; conventionally sum to 100 but this is not enforced."""

    annotation: float = DEFAULT_WEIGHT_ANNOTATION
    attendance: float = DEFAULT_WEIGHT_ATTENDANCE
    onsite: float = DEFAULT_WEIGHT_ONSITE
    accuracy: float = DEFAULT_WEIGHT_ACCURACY


@dataclass(frozen=True)
class ScoringInputs:
    actual_attendance: float
    required_attendance: float
    annotation_score: float
    onsite_performance: float
    total_inspected: int
    total_errors: int
    deduction_points: Optional[float] = 0.0
    bonus_points: Optional[float] = 0.0
    weights: WeightProfile = field(default_factory=WeightProfile)


@dataclass(frozen=True)
class ScoreBreakdown:
    attendance_score: float
    onsite_score: float
    accuracy_score: float
    base_score: float
    final_score: float


@dataclass(frozen=True)
class PerformanceRecord:
    """Thực thể miền: one row per (user_id, period).

    ``final_score`` is derived; only the store sets it.
    """

    record_id: Optional[int]
    user_id: int
    branch_id: int
    group_id: Optional[int]
    period: str
    actual_attendance: int
    required_attendance: int
    annotation_score: float
    onsite_performance: float
    total_inspected: int
    total_errors: int
    deduction_points: float = 0.0
    deduction_reason: Optional[str] = None
    bonus_points: float = 0.0
    bonus_reason: Optional[str] = None
    remarks: Optional[str] = None
    weight_annotation: float = DEFAULT_WEIGHT_ANNOTATION
    weight_attendance: float = DEFAULT_WEIGHT_ATTENDANCE
    weight_onsite: float = DEFAULT_WEIGHT_ONSITE
    weight_accuracy: float = DEFAULT_WEIGHT_ACCURACY
    final_score: Optional[float] = None
    employee_name: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def weights(self) -> WeightProfile:
        return WeightProfile(
            annotation=self.weight_annotation,
            attendance=self.weight_attendance,
            onsite=self.weight_onsite,
            accuracy=self.weight_accuracy,
        )

    def scoring_inputs(self) -> ScoringInputs:
        return ScoringInputs(
            actual_attendance=self.actual_attendance,
            required_attendance=self.required_attendance,
            annotation_score=self.annotation_score,
            onsite_performance=self.onsite_performance,
            total_inspected=self.total_inspected,
            total_errors=self.total_errors,
            deduction_points=self.deduction_points,
            bonus_points=self.bonus_points,
            weights=self.weights,
        )


@dataclass(frozen=True)
class GenerationResult:
    success: int
    failed: int
    failed_names: list[str]
    sample_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "failed": self.failed,
            "failed_names": list(self.failed_names),
            "sample_error": self.sample_error,
        }
