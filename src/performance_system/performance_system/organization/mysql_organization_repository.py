from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..scope.model import VisibilityPredicate
from .model import Branch, Group
from .repository import OrganizationRepository


def _to_branch(row: dict) -> Branch:
    return Branch(branch_id=int(row["branch_id"]), name=row["name"], code=row.get("code"))


def _to_group(row: dict) -> Group:
    return Group(
        group_id=int(row["group_id"]),
        branch_id=int(row["branch_id"]),
        name=row["name"],
        manager_id=row.get("manager_id"),
    )


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_branch(self, branch_id: int) -> Optional[Branch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT branch_id, name, code FROM branches WHERE branch_id=%s", (int(branch_id),))
            row = fetchone(cur)
            return _to_branch(row) if row else None

    def get_group(self, group_id: int) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT group_id, branch_id, name, manager_id FROM `groups` WHERE group_id=%s",
                (int(group_id),),
            )
            row = fetchone(cur)
            return _to_group(row) if row else None

    def list_branches(self, predicate: VisibilityPredicate) -> Sequence[Branch]:
        clauses: list[str] = []
        params: list[object] = []
        if predicate.branch_id is not None:
            clauses.append("b.branch_id=%s")
            params.append(int(predicate.branch_id))
        if predicate.group_id is not None:
            clauses.append("b.branch_id IN (SELECT g.branch_id FROM `groups` g WHERE g.group_id=%s)")
            params.append(int(predicate.group_id))
        where = " AND ".join(clauses) or "1=1"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT b.branch_id, b.name, b.code FROM branches b WHERE {where} ORDER BY b.name", tuple(params))
            return [_to_branch(r) for r in fetchall(cur)]

    def list_groups(self, predicate: VisibilityPredicate, *, branch_id: Optional[int] = None) -> Sequence[Group]:
        where, params = predicate.to_sql(branch_column="g.branch_id", group_column="g.group_id")
        clauses = [where]
        if branch_id is not None:
            clauses.append("g.branch_id=%s")
            params.append(int(branch_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT g.group_id, g.branch_id, g.name, g.manager_id
                FROM `groups` g
                WHERE {' AND '.join(clauses)}
                ORDER BY g.name
                """,
                tuple(params),
            )
            return [_to_group(r) for r in fetchall(cur)]
