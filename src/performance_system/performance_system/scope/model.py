from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, ScopeView


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as stored in the Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Role
    branch_id: Optional[int]
    group_id: Optional[int]

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "branch_id": self.branch_id,
            "group_id": self.group_id,
        }

    @classmethod
    def from_session(cls, data: dict) -> "Principal":
        return cls(
            user_id=int(data["user_id"]),
            name=data.get("name") or "",
            email=data.get("email") or "",
            role=Role(data["role"]),
            branch_id=data.get("branch_id"),
            group_id=data.get("group_id"),
        )


@dataclass(frozen=True)
class VisibilityPredicate:
    """Role-derived row filter.

    ``None`` for ``branch_id``/``group_id`` means "no restriction on that column".
    The same predicate is rendered to SQL for MySQL repositories and evaluated
    in-process via :meth:`allows`.
    """

    view: ScopeView
    branch_id: Optional[int] = None
    group_id: Optional[int] = None
    exclude_admins: bool = False

    @property
    def unrestricted(self) -> bool:
        return self.branch_id is None and self.group_id is None and not self.exclude_admins

    def to_sql(
        self,
        *,
        branch_column: str = "branch_id",
        group_column: str = "group_id",
        role_column: Optional[str] = None,
    ) -> tuple[str, list]:
        clauses: list[str] = []
        params: list[object] = []
        if self.branch_id is not None:
            clauses.append(f"{branch_column}=%s")
            params.append(int(self.branch_id))
        if self.group_id is not None:
            clauses.append(f"{group_column}=%s")
            params.append(int(self.group_id))
        if self.exclude_admins and role_column:
            clauses.append(f"{role_column}<>%s")
            params.append(Role.ADMIN.value)
        if not clauses:
            return "1=1", []
        return " AND ".join(clauses), params

    def allows(self, *, branch_id: Optional[int], group_id: Optional[int], role: Optional[Role] = None) -> bool:
        if self.branch_id is not None and branch_id != self.branch_id:
            return False
        if self.group_id is not None and group_id != self.group_id:
            return False
        if self.exclude_admins and role == Role.ADMIN:
            return False
        return True
