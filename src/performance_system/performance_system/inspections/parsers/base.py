from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Sequence

from ...core.constants import IMPORT_HEADER_LABELS
from ..dates import is_date_like
from ..model import InspectionRow


def to_count(value: Any) -> int:
    """Count cell -> int; anything non-numeric counts as 0."""
    if isinstance(value, bool) or value is None:
        return 0
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            number = float(str(value).strip())
    except ValueError:
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class TableParser(ABC):
    """Strategy Pattern: turn one kind of tabular source into InspectionRow list.

    Column order is fixed: date, employee name, topic, batch name,
    inspected count, error count.
    """

    @abstractmethod
    def read_cells(self, source: Any) -> list[list[Any]]:
        raise NotImplementedError

    def parse(self, source: Any) -> list[InspectionRow]:
        cells = [row for row in self.read_cells(source) if row]
        if not cells:
            return []
        if self.is_header(cells[0]):
            cells = cells[1:]
        return [self.to_row(row) for row in cells]

    @staticmethod
    def is_header(first_row: Sequence[Any]) -> bool:
        first = first_row[0] if first_row else ""
        if isinstance(first, str) and first.strip() in IMPORT_HEADER_LABELS:
            return True
        return not is_date_like(first)

    @staticmethod
    def to_row(row: Sequence[Any]) -> InspectionRow:
        padded = list(row) + [""] * (6 - len(row))
        raw_date = padded[0]
        return InspectionRow(
            raw_date=raw_date.strip() if isinstance(raw_date, str) else raw_date,
            employee_name=to_text(padded[1]),
            topic=to_text(padded[2]),
            batch_name=to_text(padded[3]),
            inspected_count=to_count(padded[4]),
            error_count=to_count(padded[5]),
        )
