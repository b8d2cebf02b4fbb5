from __future__ import annotations

from typing import Optional

from ..core.enums import Role, ScopeView
from ..core.exceptions import AuthorizationError
from .model import Principal, VisibilityPredicate


class ScopeResolver:
    """Compute the visibility predicate for a principal.

    Every read path (roster load, performance listing, inspection listing,
    dashboard) asks this class for its filter instead of deciding locally.
    """

    def resolve(self, principal: Principal, view: ScopeView) -> VisibilityPredicate:
        if principal.role == Role.ADMIN:
            return VisibilityPredicate(view=view)

        if principal.role == Role.MANAGER:
            if principal.branch_id is None:
                raise AuthorizationError("Quản lý chưa được gán chi nhánh")
            return VisibilityPredicate(
                view=view,
                branch_id=int(principal.branch_id),
                exclude_admins=(view == ScopeView.ROSTER),
            )

        if view == ScopeView.ROSTER:
            raise AuthorizationError("Bạn không có quyền")
        if principal.group_id is None:
            raise AuthorizationError("Nhân viên chưa được gán nhóm")
        return VisibilityPredicate(view=view, group_id=int(principal.group_id))

    def require_branch_access(self, principal: Principal, branch_id: Optional[int]) -> None:
        """Guard for writes (imports, generation, record edits)."""
        if principal.role == Role.ADMIN:
            return
        if principal.role == Role.MANAGER and branch_id is not None and principal.branch_id == branch_id:
            return
        raise AuthorizationError("Bạn không có quyền")
