from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from ..scope.model import VisibilityPredicate
from .model import User


class UserRepository(Protocol):
    """Giao diện repository cho User.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_by_branch(self, branch_id: int, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError

    def list_visible(
        self,
        predicate: VisibilityPredicate,
        *,
        group_id: Optional[int] = None,
        role: Optional[Role] = None,
        active_only: bool = False,
    ) -> Sequence[User]:
        raise NotImplementedError

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
        raise NotImplementedError

    def touch_last_login(self, user_id: int) -> None:
        raise NotImplementedError
