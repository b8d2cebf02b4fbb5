from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class ScopeView(str, Enum):
    """Which kind of screen a read belongs to; visibility differs per view."""

    ROSTER = "roster"
    INSPECTIONS = "inspections"
    PERFORMANCE = "performance"


class BatchField(str, Enum):
    """Inputs an operator can set for every batch-applicable roster row at once."""

    ATTENDANCE = "attendance"
    ONSITE = "onsite"
    ANNOTATION = "annotation"
    DEDUCTION = "deduction"
    BONUS = "bonus"
