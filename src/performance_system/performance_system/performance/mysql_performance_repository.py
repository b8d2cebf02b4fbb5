from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_float, to_optional_float
from ..scope.model import VisibilityPredicate
from .model import PerformanceRecord
from .repository import PerformanceRepository

_INPUT_COLUMNS = (
    "actual_attendance",
    "required_attendance",
    "annotation_score",
    "onsite_performance",
    "total_inspected",
    "total_errors",
    "deduction_points",
    "deduction_reason",
    "bonus_points",
    "bonus_reason",
    "remarks",
    "weight_annotation",
    "weight_attendance",
    "weight_onsite",
    "weight_accuracy",
    "final_score",
)

_SELECT = """
    SELECT pr.record_id, pr.user_id, pr.branch_id, pr.group_id, pr.period,
           pr.actual_attendance, pr.required_attendance, pr.annotation_score, pr.onsite_performance,
           pr.total_inspected, pr.total_errors,
           pr.deduction_points, pr.deduction_reason, pr.bonus_points, pr.bonus_reason, pr.remarks,
           pr.weight_annotation, pr.weight_attendance, pr.weight_onsite, pr.weight_accuracy,
           pr.final_score, pr.updated_at,
           u.name AS employee_name
    FROM performance_records pr
    JOIN users u ON u.user_id = pr.user_id
"""


def _to_record(r: dict) -> PerformanceRecord:
    return PerformanceRecord(
        record_id=int(r["record_id"]),
        user_id=int(r["user_id"]),
        branch_id=int(r["branch_id"]),
        group_id=r.get("group_id"),
        period=r["period"],
        actual_attendance=int(r.get("actual_attendance") or 0),
        required_attendance=int(r.get("required_attendance") or 0),
        annotation_score=to_float(r.get("annotation_score")),
        onsite_performance=to_float(r.get("onsite_performance")),
        total_inspected=int(r.get("total_inspected") or 0),
        total_errors=int(r.get("total_errors") or 0),
        deduction_points=to_float(r.get("deduction_points")),
        deduction_reason=r.get("deduction_reason"),
        bonus_points=to_float(r.get("bonus_points")),
        bonus_reason=r.get("bonus_reason"),
        remarks=r.get("remarks"),
        weight_annotation=to_float(r.get("weight_annotation")),
        weight_attendance=to_float(r.get("weight_attendance")),
        weight_onsite=to_float(r.get("weight_onsite")),
        weight_accuracy=to_float(r.get("weight_accuracy")),
        final_score=to_optional_float(r.get("final_score")),
        employee_name=r.get("employee_name"),
        updated_at=r.get("updated_at"),
    )


def _input_values(record: PerformanceRecord) -> list[object]:
    return [getattr(record, c) for c in _INPUT_COLUMNS]


class MySQLPerformanceRepository(PerformanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, record: PerformanceRecord) -> int:
        columns = ("user_id", "branch_id", "group_id", "period") + _INPUT_COLUMNS
        placeholders = ",".join(["%s"] * len(columns))
        updates = ", ".join(f"{c}=VALUES({c})" for c in ("branch_id", "group_id") + _INPUT_COLUMNS)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO performance_records ({', '.join(columns)})
                VALUES ({placeholders})
                ON DUPLICATE KEY UPDATE
                    record_id=LAST_INSERT_ID(record_id), {updates}, updated_at=NOW()
                """,
                tuple([record.user_id, record.branch_id, record.group_id, record.period] + _input_values(record)),
            )
            return int(cur.lastrowid)

    def update(self, record: PerformanceRecord) -> bool:
        assignments = ", ".join(f"{c}=%s" for c in _INPUT_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE performance_records SET {assignments}, updated_at=NOW() WHERE record_id=%s",
                tuple(_input_values(record) + [int(record.record_id)]),
            )
            return cur.rowcount > 0

    def get(self, record_id: int) -> Optional[PerformanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE pr.record_id=%s", (int(record_id),))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_visible(
        self,
        predicate: VisibilityPredicate,
        *,
        period: Optional[str] = None,
        branch_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> Sequence[PerformanceRecord]:
        where, params = predicate.to_sql(branch_column="pr.branch_id", group_column="pr.group_id")
        clauses = [where]
        if period:
            clauses.append("pr.period=%s")
            params.append(period)
        if branch_id is not None:
            clauses.append("pr.branch_id=%s")
            params.append(int(branch_id))
        if group_id is not None:
            clauses.append("pr.group_id=%s")
            params.append(int(group_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY pr.period DESC, pr.final_score DESC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def delete(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM performance_records WHERE record_id=%s", (int(record_id),))
            return cur.rowcount > 0
