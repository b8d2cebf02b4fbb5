from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import require_period
from ..core.enums import Role, ScopeView
from ..core.exceptions import NotFoundError, ValidationError
from ..organization.repository import OrganizationRepository
from ..scope.model import Principal
from ..scope.resolver import ScopeResolver
from ..users.repository import UserRepository
from .aggregator import PeriodAggregator
from .inputs import RECORD_FIELDS, clean_inputs
from .model import PerformanceRecord, ScoreBreakdown
from .scoring.base import PerformanceScorer
from .scoring.levels import score_level
from .store import PerformanceRecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordView:
    """Read-model for listing/detail screens."""

    record: PerformanceRecord
    breakdown: ScoreBreakdown
    level: str


@dataclass(frozen=True)
class DashboardStats:
    total_branches: int
    total_groups: int
    total_employees: int
    avg_score: float


class PerformanceService:
    def __init__(
        self,
        store: PerformanceRecordStore,
        aggregator: PeriodAggregator,
        users: UserRepository,
        organization: OrganizationRepository,
        scope: ScopeResolver,
        scorer: PerformanceScorer,
    ):
        self._store = store
        self._aggregator = aggregator
        self._users = users
        self._organization = organization
        self._scope = scope
        self._scorer = scorer

    def _view(self, record: PerformanceRecord) -> RecordView:
        return RecordView(
            record=record,
            breakdown=self._scorer.breakdown(record.scoring_inputs()),
            level=score_level(record.final_score),
        )

    def list_records(
        self,
        principal: Principal,
        *,
        period: Optional[str] = None,
        branch_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> list[RecordView]:
        predicate = self._scope.resolve(principal, ScopeView.PERFORMANCE)
        if period:
            period = require_period(period)
        records = self._store.list_visible(predicate, period=period, branch_id=branch_id, group_id=group_id)
        return [self._view(r) for r in records]

    def _get_visible(self, principal: Principal, record_id: int) -> PerformanceRecord:
        predicate = self._scope.resolve(principal, ScopeView.PERFORMANCE)
        record = self._store.get(record_id)
        if not record or not predicate.allows(branch_id=record.branch_id, group_id=record.group_id):
            raise NotFoundError("Bản ghi hiệu suất không tồn tại")
        return record

    def get_record(self, principal: Principal, record_id: int) -> RecordView:
        return self._view(self._get_visible(principal, record_id))

    def _get_editable(self, principal: Principal, record_id: int) -> PerformanceRecord:
        record = self._get_visible(principal, record_id)
        self._scope.require_branch_access(principal, record.branch_id)
        return record

    def edit_record(self, principal: Principal, record_id: int, changes: Mapping[str, Any]) -> RecordView:
        record = self._get_editable(principal, record_id)
        cleaned = clean_inputs(changes, allowed=RECORD_FIELDS)
        if not cleaned:
            raise ValidationError("Vui lòng nhập ít nhất 1 thay đổi")

        updated = replace(record, **cleaned)
        if updated.total_errors > updated.total_inspected:
            raise ValidationError("Số câu lỗi không được lớn hơn số câu được kiểm tra")
        if not self._store.update(updated):
            raise ValidationError("Cập nhật bản ghi thất bại")

        logger.info("Performance record %s edited by %s: %s", record_id, principal.email, sorted(cleaned))
        return self.get_record(principal, record_id)

    def refresh_qc(self, principal: Principal, record_id: int) -> RecordView:
        """Re-read the month's QC totals for the record's employee and store them."""
        record = self._get_editable(principal, record_id)
        totals = self._aggregator.aggregate([record.user_id], record.period)[record.user_id]

        updated = replace(record, total_inspected=totals.inspected, total_errors=totals.errors)
        if not self._store.update(updated):
            raise ValidationError("Cập nhật bản ghi thất bại")
        return self.get_record(principal, record_id)

    def delete_record(self, principal: Principal, record_id: int) -> None:
        self._get_editable(principal, record_id)
        if not self._store.delete(record_id):
            raise ValidationError("Xóa bản ghi thất bại")
        logger.info("Performance record %s deleted by %s", record_id, principal.email)

    def dashboard(self, principal: Principal) -> DashboardStats:
        predicate = self._scope.resolve(principal, ScopeView.PERFORMANCE)
        branches = self._organization.list_branches(predicate)
        groups = self._organization.list_groups(predicate)
        employees = self._users.list_visible(predicate, role=Role.EMPLOYEE)
        scores = [r.final_score for r in self._store.list_visible(predicate) if r.final_score is not None]
        avg = round(sum(scores) / len(scores), 1) if scores else 0.0
        return DashboardStats(
            total_branches=len(branches),
            total_groups=len(groups),
            total_employees=len(employees),
            avg_score=avg,
        )


def records_for_display(views: Sequence[RecordView]) -> list[dict]:
    out: list[dict] = []
    for v in views:
        r = v.record
        out.append(
            {
                "record_id": r.record_id,
                "user_id": r.user_id,
                "employee_name": r.employee_name or "-",
                "branch_id": r.branch_id,
                "group_id": r.group_id,
                "period": r.period,
                "actual_attendance": r.actual_attendance,
                "required_attendance": r.required_attendance,
                "annotation_score": r.annotation_score,
                "onsite_performance": r.onsite_performance,
                "total_inspected": r.total_inspected,
                "total_errors": r.total_errors,
                "deduction_points": r.deduction_points,
                "deduction_reason": r.deduction_reason,
                "bonus_points": r.bonus_points,
                "bonus_reason": r.bonus_reason,
                "remarks": r.remarks,
                "weights": {
                    "annotation": r.weight_annotation,
                    "attendance": r.weight_attendance,
                    "onsite": r.weight_onsite,
                    "accuracy": r.weight_accuracy,
                },
                "attendance_score": round(v.breakdown.attendance_score, 2),
                "onsite_score": round(v.breakdown.onsite_score, 2),
                "accuracy_score": round(v.breakdown.accuracy_score, 2),
                "final_score": None if r.final_score is None else round(r.final_score, 2),
                "level": v.level,
            }
        )
    return out
