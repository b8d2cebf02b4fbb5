from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..scope.model import VisibilityPredicate
from .model import PerformanceRecord
from .repository import PerformanceRepository
from .scoring.base import PerformanceScorer

# DECIMAL(_, 2) columns of performance_records
_DECIMAL_SCALE = 2
_DECIMAL_FIELDS = (
    "annotation_score",
    "onsite_performance",
    "deduction_points",
    "bonus_points",
    "weight_annotation",
    "weight_attendance",
    "weight_onsite",
    "weight_accuracy",
)


class PerformanceRecordStore:
    """Write-interceptor over the raw repository.

    Every insert/update passes through :meth:`_scored`, so a stored record's
    ``final_score`` is always the scorer applied to that same row's fields,
    whichever flow (batch generation, manual edit, QC refresh) wrote it.
    Decimal inputs are rounded to the column scale first, so the score matches
    the values MySQL keeps.
    """

    def __init__(self, records: PerformanceRepository, scorer: PerformanceScorer):
        self._records = records
        self._scorer = scorer

    def _scored(self, record: PerformanceRecord) -> PerformanceRecord:
        rounded = {
            name: round(getattr(record, name), _DECIMAL_SCALE)
            for name in _DECIMAL_FIELDS
            if getattr(record, name) is not None
        }
        record = replace(record, **rounded)
        return replace(record, final_score=self._scorer.score(record.scoring_inputs()))

    def upsert(self, record: PerformanceRecord) -> int:
        return self._records.upsert(self._scored(record))

    def update(self, record: PerformanceRecord) -> bool:
        if record.record_id is None:
            raise ValueError("update() needs a persisted record")
        return self._records.update(self._scored(record))

    def get(self, record_id: int) -> Optional[PerformanceRecord]:
        return self._records.get(record_id)

    def list_visible(
        self,
        predicate: VisibilityPredicate,
        *,
        period: Optional[str] = None,
        branch_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> Sequence[PerformanceRecord]:
        return self._records.list_visible(predicate, period=period, branch_id=branch_id, group_id=group_id)

    def delete(self, record_id: int) -> bool:
        return self._records.delete(record_id)
