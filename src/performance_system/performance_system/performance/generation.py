"""Batch generation of performance records for one group and period.

Flow: open a session, load the group's roster (seeded with defaults and the
month's QC totals), edit rows or apply batch values, preview the ranking,
then commit one upsert per selected row.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from ..common.validators import require_period
from ..core.constants import (
    DEFAULT_ANNOTATION_SCORE,
    DEFAULT_ONSITE_PERFORMANCE,
    DEFAULT_REQUIRED_ATTENDANCE,
)
from ..core.enums import BatchField, Role, ScopeView
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..organization.model import Group
from ..organization.repository import OrganizationRepository
from ..scope.model import Principal
from ..scope.resolver import ScopeResolver
from ..users.repository import UserRepository
from .aggregator import PeriodAggregator
from .inputs import ROW_FIELDS, clean_inputs, clean_number
from .model import GenerationResult, PerformanceRecord, ScoringInputs, WeightProfile
from .scoring.base import PerformanceScorer
from .scoring.levels import score_level
from .store import PerformanceRecordStore

logger = logging.getLogger(__name__)

# attendance fills both worked and required days
_BATCH_TARGETS: dict[BatchField, tuple[str, ...]] = {
    BatchField.ATTENDANCE: ("actual_attendance", "required_attendance"),
    BatchField.ONSITE: ("onsite_performance",),
    BatchField.ANNOTATION: ("annotation_score",),
    BatchField.DEDUCTION: ("deduction_points",),
    BatchField.BONUS: ("bonus_points",),
}


def _flag(data: dict[str, Any], key: str) -> bool:
    value = data.pop(key, True)
    if not isinstance(value, bool):
        raise ValidationError(f"{key} phải là true hoặc false")
    return value


@dataclass(frozen=True)
class GenerationDefaults:
    required_attendance: int = DEFAULT_REQUIRED_ATTENDANCE
    onsite_performance: float = DEFAULT_ONSITE_PERFORMANCE
    annotation_score: float = DEFAULT_ANNOTATION_SCORE


@dataclass
class RosterRow:
    """Mutable per-employee row of a generation session.

    ``selected`` (included in the commit) and ``batch_applicable`` (affected
    by batch values) are independent flags.
    """

    user_id: int
    name: str
    actual_attendance: int
    required_attendance: int
    annotation_score: float
    onsite_performance: float
    total_inspected: int
    total_errors: int
    deduction_points: float = 0.0
    deduction_reason: Optional[str] = None
    bonus_points: float = 0.0
    bonus_reason: Optional[str] = None
    selected: bool = True
    batch_applicable: bool = True

    def scoring_inputs(self, weights: WeightProfile) -> ScoringInputs:
        return ScoringInputs(
            actual_attendance=self.actual_attendance,
            required_attendance=self.required_attendance,
            annotation_score=self.annotation_score,
            onsite_performance=self.onsite_performance,
            total_inspected=self.total_inspected,
            total_errors=self.total_errors,
            deduction_points=self.deduction_points,
            bonus_points=self.bonus_points,
            weights=weights,
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "actual_attendance": self.actual_attendance,
            "required_attendance": self.required_attendance,
            "annotation_score": self.annotation_score,
            "onsite_performance": self.onsite_performance,
            "total_inspected": self.total_inspected,
            "total_errors": self.total_errors,
            "deduction_points": self.deduction_points,
            "deduction_reason": self.deduction_reason,
            "bonus_points": self.bonus_points,
            "bonus_reason": self.bonus_reason,
            "selected": self.selected,
            "batch_applicable": self.batch_applicable,
        }


@dataclass
class GenerationSession:
    """Caller-owned roster-in-progress; lives for one orchestration only."""

    period: str
    branch_id: Optional[int] = None
    group: Optional[Group] = None
    weights: WeightProfile = field(default_factory=WeightProfile)
    rows: dict[int, RosterRow] = field(default_factory=dict)

    def row(self, user_id: int) -> RosterRow:
        row = self.rows.get(int(user_id))
        if row is None:
            raise NotFoundError("Nhân viên không có trong danh sách")
        return row

    def update_row(self, user_id: int, **changes: Any) -> RosterRow:
        row = self.row(user_id)
        cleaned = clean_inputs(changes, allowed=ROW_FIELDS)
        for name, value in cleaned.items():
            setattr(row, name, value)
        return row

    def set_selected(self, user_id: int, selected: bool) -> None:
        self.row(user_id).selected = bool(selected)

    def set_batch_applicable(self, user_id: int, applicable: bool) -> None:
        self.row(user_id).batch_applicable = bool(applicable)

    def select_all(self, selected: bool = True) -> None:
        for row in self.rows.values():
            row.selected = bool(selected)

    def apply_batch(self, batch_field: BatchField, value: Any) -> int:
        """Set one input on every batch-applicable row; returns rows touched."""
        targets = _BATCH_TARGETS[BatchField(batch_field)]
        cleaned = clean_number(targets[0], value)
        touched = 0
        for row in self.rows.values():
            if row.batch_applicable:
                for target in targets:
                    setattr(row, target, cleaned)
                touched += 1
        return touched

    def selected_rows(self) -> list[RosterRow]:
        return [r for r in self.rows.values() if r.selected]


@dataclass(frozen=True)
class PreviewRow:
    row: RosterRow
    score: float
    level: str


class BatchGenerationService:
    def __init__(
        self,
        users: UserRepository,
        organization: OrganizationRepository,
        aggregator: PeriodAggregator,
        store: PerformanceRecordStore,
        scope: ScopeResolver,
        scorer: PerformanceScorer,
        *,
        defaults: GenerationDefaults | None = None,
    ):
        self._users = users
        self._organization = organization
        self._aggregator = aggregator
        self._store = store
        self._scope = scope
        self._scorer = scorer
        self._defaults = defaults or GenerationDefaults()

    def open_session(
        self,
        principal: Principal,
        *,
        period: str,
        branch_id: Optional[int] = None,
        weights: WeightProfile | None = None,
    ) -> GenerationSession:
        predicate = self._scope.resolve(principal, ScopeView.ROSTER)
        if predicate.branch_id is not None:
            # Managers always generate inside their own branch.
            branch_id = predicate.branch_id
        return GenerationSession(
            period=require_period(period),
            branch_id=branch_id,
            weights=weights or WeightProfile(),
        )

    def _visible_group(self, principal: Principal, session: GenerationSession, group_id: int) -> Group:
        predicate = self._scope.resolve(principal, ScopeView.ROSTER)
        group = self._organization.get_group(int(group_id))
        if not group:
            raise NotFoundError("Nhóm không tồn tại")
        if not predicate.allows(branch_id=group.branch_id, group_id=group.group_id):
            raise AuthorizationError("Bạn không có quyền")
        if session.branch_id is not None and group.branch_id != session.branch_id:
            raise ValidationError("Nhóm không thuộc chi nhánh đã chọn")
        return group

    def load_roster(self, principal: Principal, session: GenerationSession, group_id: int) -> GenerationSession:
        """Replace the session's rows with the group's employees for the period."""
        group = self._visible_group(principal, session, group_id)
        predicate = self._scope.resolve(principal, ScopeView.ROSTER)
        employees = self._users.list_visible(
            predicate, group_id=group.group_id, role=Role.EMPLOYEE, active_only=True
        )
        totals = self._aggregator.aggregate([e.user_id for e in employees], session.period)

        d = self._defaults
        rows: dict[int, RosterRow] = {}
        for emp in employees:
            qc = totals[emp.user_id]
            rows[emp.user_id] = RosterRow(
                user_id=emp.user_id,
                name=emp.name,
                actual_attendance=d.required_attendance,
                required_attendance=d.required_attendance,
                annotation_score=d.annotation_score,
                onsite_performance=d.onsite_performance,
                total_inspected=qc.inspected,
                total_errors=qc.errors,
            )

        session.group = group
        session.branch_id = group.branch_id
        session.rows = rows
        logger.debug("Roster for group %s / %s: %d employees", group.group_id, session.period, len(rows))
        return session

    def restore_session(
        self,
        principal: Principal,
        *,
        period: str,
        group_id: int,
        rows: Iterable[Mapping[str, Any]],
        weights: WeightProfile | None = None,
    ) -> GenerationSession:
        """Rebuild a session from rows an operator edited client-side.

        Only employees of the group's roster are accepted; QC totals of rows
        that omit them are taken from the period aggregate.
        """
        session = self.load_roster(principal, self.open_session(principal, period=period, weights=weights), group_id)
        submitted: dict[int, RosterRow] = {}
        for payload in rows:
            data = dict(payload)
            if data.get("user_id") is None:
                raise ValidationError("Thiếu mã nhân viên trong danh sách")
            user_id = int(data.pop("user_id"))
            for display_only in ("name", "score", "level"):
                data.pop(display_only, None)
            selected = _flag(data, "selected")
            batch_applicable = _flag(data, "batch_applicable")
            row = session.update_row(user_id, **data)
            row.selected = selected
            row.batch_applicable = batch_applicable
            submitted[user_id] = row
        session.rows = submitted
        return session

    def preview(self, session: GenerationSession) -> list[PreviewRow]:
        """Advisory ranking; also re-orders the session's rows by score."""
        scored: list[PreviewRow] = []
        for row in session.rows.values():
            score = self._scorer.score(row.scoring_inputs(session.weights))
            scored.append(PreviewRow(row=row, score=score, level=score_level(score)))
        scored.sort(key=lambda p: p.score, reverse=True)
        session.rows = {p.row.user_id: p.row for p in scored}
        return scored

    def commit(self, principal: Principal, session: GenerationSession) -> GenerationResult:
        if session.group is None or not session.period:
            raise ValidationError("Vui lòng chọn nhóm và kỳ đánh giá")
        selected = session.selected_rows()
        if not selected:
            raise ValidationError("Vui lòng chọn ít nhất một nhân viên")

        group = session.group
        self._scope.require_branch_access(principal, group.branch_id)

        w = session.weights
        success = 0
        failed_names: list[str] = []
        sample_error: Optional[str] = None
        for row in selected:
            record = PerformanceRecord(
                record_id=None,
                user_id=row.user_id,
                branch_id=group.branch_id,
                group_id=group.group_id,
                period=session.period,
                actual_attendance=row.actual_attendance,
                required_attendance=row.required_attendance,
                annotation_score=row.annotation_score,
                onsite_performance=row.onsite_performance,
                total_inspected=row.total_inspected,
                total_errors=row.total_errors,
                deduction_points=row.deduction_points,
                deduction_reason=row.deduction_reason,
                bonus_points=row.bonus_points,
                bonus_reason=row.bonus_reason,
                weight_annotation=w.annotation,
                weight_attendance=w.attendance,
                weight_onsite=w.onsite,
                weight_accuracy=w.accuracy,
            )
            try:
                self._store.upsert(record)
                success += 1
            except Exception as e:
                logger.warning("Performance upsert failed for %s (%s): %s", row.name, session.period, e)
                failed_names.append(row.name)
                if sample_error is None:
                    sample_error = str(e)

        logger.info(
            "Generated %s performance for group %s by %s: %d saved, %d failed",
            session.period, group.group_id, principal.email, success, len(failed_names),
        )
        return GenerationResult(
            success=success,
            failed=len(failed_names),
            failed_names=failed_names,
            sample_error=sample_error,
        )
