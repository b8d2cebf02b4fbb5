from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..core.constants import ACCURACY_THRESHOLD, IMPORT_ERROR_LIMIT, RECENT_IMPORTS_LIMIT
from ..core.enums import Role, ScopeView
from ..core.exceptions import ImportFormatError, NotFoundError
from ..organization.repository import OrganizationRepository
from ..scope.model import Principal
from ..scope.resolver import ScopeResolver
from ..users.model import User
from ..users.repository import UserRepository
from .dates import parse_inspection_date
from .model import AccuracyRow, ImportResult, InspectionRow, QualityInspection
from .parsers.factory import TableParserFactory
from .repository import InspectionRepository

logger = logging.getLogger(__name__)


@dataclass
class _MergedAggregate:
    user_id: int
    inspection_date: date
    topic: str
    batch_name: str
    inspected_count: int
    error_count: int


class BranchRoster:
    """Employee lookup for one branch: exact email first, then exact name.

    Names are matched case-sensitively and only inside the branch. A name
    shared by several employees of the branch is ambiguous and never guessed.
    """

    def __init__(self, employees: Iterable[User]):
        self._by_email: dict[str, User] = {}
        self._by_name: dict[str, list[User]] = {}
        for u in employees:
            self._by_email[u.email] = u
            self._by_name.setdefault(u.name, []).append(u)

    def resolve(self, reference: str) -> tuple[Optional[User], Optional[str]]:
        user = self._by_email.get(reference)
        if user:
            return user, None
        matches = self._by_name.get(reference, [])
        if not matches:
            return None, f"Không tìm thấy nhân viên: {reference}"
        if len(matches) > 1:
            return None, f"Tên nhân viên bị trùng trong chi nhánh: {reference}"
        return matches[0], None


class InspectionImportService:
    """Use case: reconcile a QC submission into per (employee, date, batch) aggregates."""

    def __init__(
        self,
        inspections: InspectionRepository,
        users: UserRepository,
        organization: OrganizationRepository,
        scope: ScopeResolver,
        *,
        parser_factory: TableParserFactory | None = None,
        error_limit: int = IMPORT_ERROR_LIMIT,
    ):
        self._inspections = inspections
        self._users = users
        self._organization = organization
        self._scope = scope
        self._parsers = parser_factory or TableParserFactory()
        self._error_limit = int(error_limit)

    def import_file(self, principal: Principal, *, branch_id: int, filename: str, content: bytes) -> ImportResult:
        parser = self._parsers.for_filename(filename)
        try:
            rows = parser.parse(content)
        except Exception as e:
            logger.warning("Could not read import file %r: %s", filename, e)
            raise ImportFormatError("Nhập dữ liệu thất bại, vui lòng kiểm tra định dạng tệp") from e
        return self.import_rows(principal, branch_id=branch_id, rows=rows)

    def import_text(self, principal: Principal, *, branch_id: int, text: str) -> ImportResult:
        rows = self._parsers.for_text().parse(text)
        return self.import_rows(principal, branch_id=branch_id, rows=rows)

    def import_rows(self, principal: Principal, *, branch_id: int, rows: Sequence[InspectionRow]) -> ImportResult:
        self._scope.require_branch_access(principal, branch_id)
        if not self._organization.get_branch(branch_id):
            raise NotFoundError("Chi nhánh không tồn tại")

        roster = BranchRoster(self._users.list_by_branch(branch_id, role=Role.EMPLOYEE))
        errors: list[str] = []
        failed = 0
        merged: dict[tuple[int, date, str], _MergedAggregate] = {}

        for row in rows:
            user, error = roster.resolve(row.employee_name)
            if error:
                errors.append(error)
                failed += 1
                continue

            work_date = parse_inspection_date(row.raw_date)
            if work_date is None:
                errors.append(f"Ngày không hợp lệ: {row.raw_date}")
                failed += 1
                continue

            key = (user.user_id, work_date, row.batch_name)
            agg = merged.get(key)
            if agg:
                agg.inspected_count += row.inspected_count
                agg.error_count += row.error_count
            else:
                merged[key] = _MergedAggregate(
                    user_id=user.user_id,
                    inspection_date=work_date,
                    topic=row.topic,
                    batch_name=row.batch_name,
                    inspected_count=row.inspected_count,
                    error_count=row.error_count,
                )

        success = 0
        for agg in merged.values():
            try:
                self._inspections.upsert_aggregate(
                    user_id=agg.user_id,
                    branch_id=int(branch_id),
                    inspection_date=agg.inspection_date,
                    topic=agg.topic,
                    batch_name=agg.batch_name,
                    inspected_count=agg.inspected_count,
                    error_count=agg.error_count,
                )
                success += 1
            except Exception as e:
                logger.warning("QC upsert failed for user %s on %s: %s", agg.user_id, agg.inspection_date, e)
                errors.append(f"Nhập thất bại: {e}")
                failed += 1

        logger.info(
            "QC import into branch %s by %s: %d rows, %d aggregates saved, %d failed",
            branch_id, principal.email, len(rows), success, failed,
        )
        return ImportResult(success=success, failed=failed, errors=errors[: self._error_limit])


class InspectionQueryService:
    """Use case: scoped QC listings and the accuracy summary."""

    def __init__(
        self,
        inspections: InspectionRepository,
        scope: ScopeResolver,
        *,
        accuracy_threshold: float = ACCURACY_THRESHOLD,
    ):
        self._inspections = inspections
        self._scope = scope
        self._threshold = float(accuracy_threshold)

    def list_inspections(
        self,
        principal: Principal,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        branch_id: Optional[int] = None,
        group_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[QualityInspection]:
        predicate = self._scope.resolve(principal, ScopeView.INSPECTIONS)
        return self._inspections.list_visible(
            predicate,
            start_date=start,
            end_date=end,
            branch_id=branch_id,
            group_id=group_id,
            user_id=user_id,
        )

    def recent_imports(self, principal: Principal, *, limit: int = RECENT_IMPORTS_LIMIT) -> Sequence[QualityInspection]:
        predicate = self._scope.resolve(principal, ScopeView.INSPECTIONS)
        return self._inspections.list_recent(predicate, limit=limit)

    def accuracy_summary(self, principal: Principal, **filters: Any) -> list[AccuracyRow]:
        totals: dict[int, dict] = {}
        for r in self.list_inspections(principal, **filters):
            t = totals.get(r.user_id)
            if not t:
                t = {"name": r.employee_name or "-", "inspected": 0, "errors": 0}
                totals[r.user_id] = t
            t["inspected"] += r.inspected_count
            t["errors"] += r.error_count

        out: list[AccuracyRow] = []
        for user_id, t in totals.items():
            accuracy = accuracy_percent(t["inspected"], t["errors"])
            out.append(
                AccuracyRow(
                    user_id=user_id,
                    employee_name=t["name"],
                    inspected=t["inspected"],
                    errors=t["errors"],
                    accuracy=accuracy,
                    meets_threshold=accuracy >= self._threshold,
                )
            )
        out.sort(key=lambda x: x.accuracy, reverse=True)
        return out


def accuracy_percent(inspected: int, errors: int) -> float:
    """Display accuracy; 0 when nothing was inspected (unlike the scoring rule)."""
    return (inspected - errors) / inspected * 100 if inspected > 0 else 0.0
