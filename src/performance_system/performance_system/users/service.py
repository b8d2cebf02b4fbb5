from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role, ScopeView
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..scope.model import Principal
from ..scope.resolver import ScopeResolver
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: verify(email, password) -> Principal."""

    def __init__(self, users: UserRepository):
        self._users = users

    def verify(self, email: str, password: str) -> Principal:
        user = self._users.get_by_email((email or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Sai tài khoản hoặc mật khẩu")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Sai tài khoản hoặc mật khẩu")

        self._users.touch_last_login(user.user_id)
        logger.info("User %s logged in as %s", user.email, user.role.value)
        return Principal(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            branch_id=user.branch_id,
            group_id=user.group_id,
        )


class UserService:
    """Use case: roster-management reads and account creation."""

    def __init__(self, users: UserRepository, scope: ScopeResolver):
        self._users = users
        self._scope = scope

    def list_visible(self, principal: Principal, *, group_id: Optional[int] = None) -> Sequence[User]:
        predicate = self._scope.resolve(principal, ScopeView.ROSTER)
        return self._users.list_visible(predicate, group_id=group_id)

    def create_account(
        self,
        principal: Principal,
        *,
        name: str,
        email: str,
        password: str,
        role: Role,
        branch_id: Optional[int],
        group_id: Optional[int],
    ) -> int:
        name = require_non_empty(name, "Họ tên")
        email = require_non_empty(email, "Email")
        require_min_length(password, "Mật khẩu", 6)

        if role == Role.ADMIN:
            if principal.role != Role.ADMIN:
                raise AuthorizationError("Bạn không có quyền")
        else:
            if branch_id is None:
                raise ValidationError("Vui lòng chọn chi nhánh")
            self._scope.require_branch_access(principal, branch_id)
            if principal.role == Role.MANAGER and role != Role.EMPLOYEE:
                raise AuthorizationError("Quản lý chỉ được tạo tài khoản nhân viên")

        if self._users.get_by_email(email):
            raise ValidationError("Email đã tồn tại")

        return self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            branch_id=branch_id,
            group_id=group_id,
        )
