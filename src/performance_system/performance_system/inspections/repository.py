from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..scope.model import VisibilityPredicate
from .model import QCTotals, QualityInspection


class InspectionRepository(Protocol):
    def upsert_aggregate(
        self,
        *,
        user_id: int,
        branch_id: int,
        inspection_date: date,
        topic: str,
        batch_name: str,
        inspected_count: int,
        error_count: int,
    ) -> None:
        """Insert or replace the counts stored for (user_id, inspection_date, batch_name)."""

        raise NotImplementedError

    def sum_by_user(self, user_ids: Iterable[int], *, start_date: date, end_date: date) -> dict[int, QCTotals]:
        raise NotImplementedError

    def list_visible(
        self,
        predicate: VisibilityPredicate,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        branch_id: Optional[int] = None,
        group_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[QualityInspection]:
        raise NotImplementedError

    def list_recent(self, predicate: VisibilityPredicate, *, limit: int) -> Sequence[QualityInspection]:
        raise NotImplementedError
