from __future__ import annotations

from ..model import ScoreBreakdown, ScoringInputs
from .base import PerformanceScorer


class WeightedCompositeScorer(PerformanceScorer):
    """Weighted sum of four sub-scores, then minus deduction plus bonus.

    Sub-scores with a zero denominator count as a neutral 100. The final
    score is not clamped: it may be negative or exceed 100.
    """

    def breakdown(self, inputs: ScoringInputs) -> ScoreBreakdown:
        if inputs.required_attendance > 0:
            attendance_score = inputs.actual_attendance / inputs.required_attendance * 100
        else:
            attendance_score = 100.0

        onsite_score = inputs.onsite_performance / 5 * 100

        if inputs.total_inspected > 0:
            accuracy_score = (1 - inputs.total_errors / inputs.total_inspected) * 100
        else:
            accuracy_score = 100.0

        w = inputs.weights
        base_score = (
            inputs.annotation_score * w.annotation / 100
            + attendance_score * w.attendance / 100
            + onsite_score * w.onsite / 100
            + accuracy_score * w.accuracy / 100
        )
        final_score = base_score - (inputs.deduction_points or 0) + (inputs.bonus_points or 0)

        return ScoreBreakdown(
            attendance_score=attendance_score,
            onsite_score=onsite_score,
            accuracy_score=accuracy_score,
            base_score=base_score,
            final_score=final_score,
        )
