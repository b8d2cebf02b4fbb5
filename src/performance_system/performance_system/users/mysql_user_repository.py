from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..scope.model import VisibilityPredicate
from .model import User
from .repository import UserRepository

_COLUMNS = "u.user_id, u.name, u.email, u.password_hash, u.role, u.branch_id, u.group_id, u.is_active"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        branch_id=row.get("branch_id"),
        group_id=row.get("group_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users u WHERE u.user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users u WHERE u.email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_by_branch(self, branch_id: int, *, role: Optional[Role] = None) -> Sequence[User]:
        clauses = ["u.branch_id=%s"]
        params: list[object] = [int(branch_id)]
        if role is not None:
            clauses.append("u.role=%s")
            params.append(role.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users u WHERE {' AND '.join(clauses)} ORDER BY u.name",
                tuple(params),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def list_visible(
        self,
        predicate: VisibilityPredicate,
        *,
        group_id: Optional[int] = None,
        role: Optional[Role] = None,
        active_only: bool = False,
    ) -> Sequence[User]:
        where, params = predicate.to_sql(
            branch_column="u.branch_id",
            group_column="u.group_id",
            role_column="u.role",
        )
        clauses = [where]
        if group_id is not None:
            clauses.append("u.group_id=%s")
            params.append(int(group_id))
        if role is not None:
            clauses.append("u.role=%s")
            params.append(role.value)
        if active_only:
            clauses.append("u.is_active=1")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users u WHERE {' AND '.join(clauses)} ORDER BY u.name",
                tuple(params),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        branch_id: Optional[int],
        group_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, password_hash, role, branch_id, group_id, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                """,
                (name, email, password_hash, role.value, branch_id, group_id),
            )
            return int(cur.lastrowid)

    def touch_last_login(self, user_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET last_login_at=NOW() WHERE user_id=%s", (int(user_id),))
