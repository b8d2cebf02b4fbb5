from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..scope.model import VisibilityPredicate
from .model import PerformanceRecord


class PerformanceRepository(Protocol):
    """Raw persistence for performance records.

    Services never use this directly; they go through PerformanceRecordStore,
    which recomputes ``final_score`` on every write.
    """

    def upsert(self, record: PerformanceRecord) -> int:
        """Insert, or overwrite the row with the same (user_id, period). Returns record_id."""

        raise NotImplementedError

    def update(self, record: PerformanceRecord) -> bool:
        raise NotImplementedError

    def get(self, record_id: int) -> Optional[PerformanceRecord]:
        raise NotImplementedError

    def list_visible(
        self,
        predicate: VisibilityPredicate,
        *,
        period: Optional[str] = None,
        branch_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> Sequence[PerformanceRecord]:
        raise NotImplementedError

    def delete(self, record_id: int) -> bool:
        raise NotImplementedError
