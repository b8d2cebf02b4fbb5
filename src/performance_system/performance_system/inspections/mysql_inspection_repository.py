from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from ..scope.model import VisibilityPredicate
from .model import QCTotals, QualityInspection
from .repository import InspectionRepository

_SELECT = """
    SELECT qi.inspection_id, qi.user_id, qi.branch_id, qi.inspection_date, qi.topic, qi.batch_name,
           qi.inspected_count, qi.error_count, qi.created_at,
           u.name AS employee_name, u.group_id
    FROM quality_inspections qi
    JOIN users u ON u.user_id = qi.user_id
"""


def _to_inspection(r: dict) -> QualityInspection:
    return QualityInspection(
        inspection_id=int(r["inspection_id"]),
        user_id=int(r["user_id"]),
        branch_id=int(r["branch_id"]),
        inspection_date=r["inspection_date"],
        topic=r.get("topic") or "",
        batch_name=r.get("batch_name") or "",
        inspected_count=int(r.get("inspected_count") or 0),
        error_count=int(r.get("error_count") or 0),
        employee_name=r.get("employee_name"),
        group_id=r.get("group_id"),
        created_at=r.get("created_at"),
    )


class MySQLInspectionRepository(InspectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_aggregate(
        self,
        *,
        user_id: int,
        branch_id: int,
        inspection_date: date,
        topic: str,
        batch_name: str,
        inspected_count: int,
        error_count: int,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO quality_inspections
                    (user_id, branch_id, inspection_date, topic, batch_name, inspected_count, error_count)
                VALUES (%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    branch_id=VALUES(branch_id),
                    topic=VALUES(topic),
                    inspected_count=VALUES(inspected_count),
                    error_count=VALUES(error_count)
                """,
                (
                    int(user_id),
                    int(branch_id),
                    inspection_date,
                    topic,
                    batch_name,
                    int(inspected_count),
                    int(error_count),
                ),
            )

    def sum_by_user(self, user_ids: Iterable[int], *, start_date: date, end_date: date) -> dict[int, QCTotals]:
        ids = [int(u) for u in user_ids]
        if not ids:
            return {}
        in_sql, params = in_clause("user_id", ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id,
                       COALESCE(SUM(inspected_count), 0) AS inspected,
                       COALESCE(SUM(error_count), 0) AS errors
                FROM quality_inspections
                WHERE {in_sql} AND inspection_date BETWEEN %s AND %s
                GROUP BY user_id
                """,
                tuple(params + [start_date, end_date]),
            )
            return {
                int(r["user_id"]): QCTotals(inspected=int(r["inspected"]), errors=int(r["errors"]))
                for r in fetchall(cur)
            }

    def list_visible(
        self,
        predicate: VisibilityPredicate,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        branch_id: Optional[int] = None,
        group_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[QualityInspection]:
        # Group membership is the employee's current group.
        where, params = predicate.to_sql(branch_column="qi.branch_id", group_column="u.group_id")
        clauses = [where]
        if start_date is not None:
            clauses.append("qi.inspection_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("qi.inspection_date <= %s")
            params.append(end_date)
        if branch_id is not None:
            clauses.append("qi.branch_id=%s")
            params.append(int(branch_id))
        if group_id is not None:
            clauses.append("u.group_id=%s")
            params.append(int(group_id))
        if user_id is not None:
            clauses.append("qi.user_id=%s")
            params.append(int(user_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY qi.inspection_date ASC, qi.inspection_id ASC",
                tuple(params),
            )
            return [_to_inspection(r) for r in fetchall(cur)]

    def list_recent(self, predicate: VisibilityPredicate, *, limit: int) -> Sequence[QualityInspection]:
        where, params = predicate.to_sql(branch_column="qi.branch_id", group_column="u.group_id")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY qi.created_at DESC, qi.inspection_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_to_inspection(r) for r in fetchall(cur)]
