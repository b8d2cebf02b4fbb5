from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Thực thể miền (domain): User (admin / manager / employee).

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    branch_id: Optional[int]
    group_id: Optional[int]
    is_active: bool = True
