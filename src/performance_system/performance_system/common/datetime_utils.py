from __future__ import annotations

import calendar
from datetime import date, datetime

from .validators import require_period


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def period_bounds(period: str) -> tuple[date, date]:
    """Inclusive first/last day of a ``YYYY-MM`` period (leap years included)."""
    period = require_period(period)
    year, month = (int(p) for p in period.split("-"))
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def recent_periods(count: int, *, today: date | None = None) -> list[str]:
    """The ``count`` months before ``today``'s month, newest first."""
    today = today or now_local().date()
    year, month = today.year, today.month
    out: list[str] = []
    for _ in range(count):
        month -= 1
        if month == 0:
            year, month = year - 1, 12
        out.append(f"{year:04d}-{month:02d}")
    return out
