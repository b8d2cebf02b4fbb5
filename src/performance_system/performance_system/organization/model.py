from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Branch:
    branch_id: int
    name: str
    code: Optional[str] = None


@dataclass(frozen=True)
class Group:
    group_id: int
    branch_id: int
    name: str
    manager_id: Optional[int] = None
