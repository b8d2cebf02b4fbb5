from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional


@dataclass(frozen=True)
class InspectionRow:
    """One raw row of a quality-inspection submission, after column mapping.

    ``raw_date`` is kept unparsed (string, spreadsheet serial or date cell);
    parsing happens during reconciliation so bad dates become per-row errors.
    """

    raw_date: Any
    employee_name: str
    topic: str
    batch_name: str
    inspected_count: int
    error_count: int


@dataclass(frozen=True)
class QualityInspection:
    """Thực thể miền: aggregate keyed by (user_id, inspection_date, batch_name)."""

    inspection_id: Optional[int]
    user_id: int
    branch_id: int
    inspection_date: date
    topic: str
    batch_name: str
    inspected_count: int
    error_count: int
    employee_name: Optional[str] = None
    group_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class QCTotals:
    inspected: int = 0
    errors: int = 0


@dataclass(frozen=True)
class ImportResult:
    success: int
    failed: int
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"success": self.success, "failed": self.failed, "errors": list(self.errors)}


@dataclass(frozen=True)
class AccuracyRow:
    """Read-model cho màn hình tỷ lệ chính xác QC."""

    user_id: int
    employee_name: str
    inspected: int
    errors: int
    accuracy: float
    meets_threshold: bool
