from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..scope.model import VisibilityPredicate
from .model import Branch, Group


class OrganizationRepository(Protocol):
    def get_branch(self, branch_id: int) -> Optional[Branch]:
        raise NotImplementedError

    def get_group(self, group_id: int) -> Optional[Group]:
        raise NotImplementedError

    def list_branches(self, predicate: VisibilityPredicate) -> Sequence[Branch]:
        raise NotImplementedError

    def list_groups(self, predicate: VisibilityPredicate, *, branch_id: Optional[int] = None) -> Sequence[Group]:
        raise NotImplementedError
