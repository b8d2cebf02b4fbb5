from __future__ import annotations

from datetime import date

import pytest

from src.performance_system.performance_system.common.datetime_utils import period_bounds, recent_periods
from src.performance_system.performance_system.core.exceptions import ValidationError


def test_leap_february():
    assert period_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))


def test_common_february():
    assert period_bounds("2023-02") == (date(2023, 2, 1), date(2023, 2, 28))


def test_thirty_day_month():
    assert period_bounds("2024-04") == (date(2024, 4, 1), date(2024, 4, 30))


@pytest.mark.parametrize("bad", ["2024-13", "2024-2", "24-02", "", "2024/02"])
def test_malformed_period_rejected(bad):
    with pytest.raises(ValidationError):
        period_bounds(bad)


def test_recent_periods_start_at_previous_month_and_cross_year():
    assert recent_periods(3, today=date(2024, 2, 15)) == ["2024-01", "2023-12", "2023-11"]
