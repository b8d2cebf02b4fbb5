from __future__ import annotations

from typing import Iterable

from ..common.datetime_utils import period_bounds
from ..inspections.model import QCTotals
from ..inspections.repository import InspectionRepository


class PeriodAggregator:
    """Sum QC aggregates per employee over one calendar month. Read-only."""

    def __init__(self, inspections: InspectionRepository):
        self._inspections = inspections

    def aggregate(self, user_ids: Iterable[int], period: str) -> dict[int, QCTotals]:
        start, end = period_bounds(period)
        ids = list(dict.fromkeys(int(u) for u in user_ids))
        if not ids:
            return {}
        sums = self._inspections.sum_by_user(ids, start_date=start, end_date=end)
        return {uid: sums.get(uid, QCTotals()) for uid in ids}
