from __future__ import annotations

from datetime import date

import pytest

from src.performance_system.performance_system.core.exceptions import ValidationError
from src.performance_system.performance_system.inspections.model import QCTotals
from src.performance_system.performance_system.performance.aggregator import PeriodAggregator


class CountingInspections:
    def __init__(self, inner):
        self._inner = inner
        self.calls = 0

    def sum_by_user(self, user_ids, *, start_date, end_date):
        self.calls += 1
        return self._inner.sum_by_user(user_ids, start_date=start_date, end_date=end_date)


def test_sums_inside_month_only(inspections_repo):
    inspections_repo.add(user_id=101, branch_id=1, inspection_date=date(2024, 2, 1), inspected_count=10, error_count=1)
    inspections_repo.add(user_id=101, branch_id=1, inspection_date=date(2024, 2, 29), inspected_count=20, error_count=2)
    inspections_repo.add(user_id=101, branch_id=1, inspection_date=date(2024, 3, 1), inspected_count=99, error_count=9)
    inspections_repo.add(user_id=101, branch_id=1, inspection_date=date(2024, 1, 31), inspected_count=99, error_count=9)

    totals = PeriodAggregator(inspections_repo).aggregate([101], "2024-02")

    assert totals == {101: QCTotals(30, 3)}


def test_missing_employee_gets_zero_totals(inspections_repo):
    totals = PeriodAggregator(inspections_repo).aggregate([101, 102, 101], "2024-03")
    assert totals == {101: QCTotals(0, 0), 102: QCTotals(0, 0)}


def test_empty_id_set_skips_query(inspections_repo):
    counting = CountingInspections(inspections_repo)
    assert PeriodAggregator(counting).aggregate([], "2024-03") == {}
    assert counting.calls == 0


def test_bad_period(inspections_repo):
    with pytest.raises(ValidationError):
        PeriodAggregator(inspections_repo).aggregate([101], "March")
