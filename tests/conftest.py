from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from src.performance_system.performance_system.container import wire_container
from src.performance_system.performance_system.core.enums import Role
from src.performance_system.performance_system.inspections.model import QCTotals, QualityInspection
from src.performance_system.performance_system.organization.model import Branch, Group
from src.performance_system.performance_system.scope.model import Principal
from src.performance_system.performance_system.users.model import User

PASSWORD = "secret123"
_HASH = generate_password_hash(PASSWORD)


class FakeUserRepo:
    def __init__(self, users):
        self._users: dict[int, User] = {u.user_id: u for u in users}
        self.logins: list[int] = []

    def get_by_id(self, user_id):
        return self._users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self._users.values() if u.email == email), None)

    def list_by_branch(self, branch_id, *, role=None):
        return [
            u for u in self._users.values()
            if u.branch_id == branch_id and (role is None or u.role == role)
        ]

    def list_visible(self, predicate, *, group_id=None, role=None, active_only=False):
        out = []
        for u in sorted(self._users.values(), key=lambda x: x.name):
            if not predicate.allows(branch_id=u.branch_id, group_id=u.group_id, role=u.role):
                continue
            if group_id is not None and u.group_id != group_id:
                continue
            if role is not None and u.role != role:
                continue
            if active_only and not u.is_active:
                continue
            out.append(u)
        return out

    def create_user(self, *, name, email, password_hash, role, branch_id, group_id):
        user_id = max(self._users) + 1
        self._users[user_id] = User(user_id, name, email, password_hash, role, branch_id, group_id)
        return user_id

    def touch_last_login(self, user_id):
        self.logins.append(user_id)


class FakeOrganizationRepo:
    def __init__(self, branches, groups):
        self._branches = {b.branch_id: b for b in branches}
        self._groups = {g.group_id: g for g in groups}

    def get_branch(self, branch_id):
        return self._branches.get(int(branch_id))

    def get_group(self, group_id):
        return self._groups.get(int(group_id))

    def list_branches(self, predicate):
        out = []
        for b in self._branches.values():
            if predicate.branch_id is not None and b.branch_id != predicate.branch_id:
                continue
            if predicate.group_id is not None:
                group = self._groups.get(predicate.group_id)
                if not group or group.branch_id != b.branch_id:
                    continue
            out.append(b)
        return out

    def list_groups(self, predicate, *, branch_id=None):
        return [
            g for g in self._groups.values()
            if predicate.allows(branch_id=g.branch_id, group_id=g.group_id)
            and (branch_id is None or g.branch_id == branch_id)
        ]


class FakeInspectionRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self._rows: dict[tuple, QualityInspection] = {}
        self._next_id = 1
        self.fail_for: set[int] = set()
        self.upserts = 0

    def upsert_aggregate(self, *, user_id, branch_id, inspection_date, topic, batch_name, inspected_count, error_count):
        if user_id in self.fail_for:
            raise RuntimeError("Deadlock found when trying to get lock")
        self.upserts += 1
        key = (user_id, inspection_date, batch_name)
        existing = self._rows.get(key)
        inspection_id = existing.inspection_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self._rows[key] = QualityInspection(
            inspection_id=inspection_id,
            user_id=user_id,
            branch_id=branch_id,
            inspection_date=inspection_date,
            topic=topic,
            batch_name=batch_name,
            inspected_count=inspected_count,
            error_count=error_count,
            created_at=datetime(2024, 3, 1, 8, 0) if existing is None else existing.created_at,
        )

    def add(self, *, user_id, branch_id, inspection_date, inspected_count, error_count, batch_name="B1", topic="T"):
        self.upsert_aggregate(
            user_id=user_id,
            branch_id=branch_id,
            inspection_date=inspection_date,
            topic=topic,
            batch_name=batch_name,
            inspected_count=inspected_count,
            error_count=error_count,
        )

    def _joined(self, r: QualityInspection) -> QualityInspection:
        user = self._users.get_by_id(r.user_id)
        return replace(r, employee_name=user.name if user else None, group_id=user.group_id if user else None)

    def all(self):
        return [self._joined(r) for r in self._rows.values()]

    def sum_by_user(self, user_ids, *, start_date, end_date):
        ids = set(user_ids)
        out: dict[int, QCTotals] = {}
        for r in self._rows.values():
            if r.user_id in ids and start_date <= r.inspection_date <= end_date:
                t = out.get(r.user_id, QCTotals())
                out[r.user_id] = QCTotals(t.inspected + r.inspected_count, t.errors + r.error_count)
        return out

    def list_visible(self, predicate, *, start_date=None, end_date=None, branch_id=None, group_id=None, user_id=None):
        out = []
        for r in self.all():
            if not predicate.allows(branch_id=r.branch_id, group_id=r.group_id):
                continue
            if start_date and r.inspection_date < start_date:
                continue
            if end_date and r.inspection_date > end_date:
                continue
            if branch_id is not None and r.branch_id != branch_id:
                continue
            if group_id is not None and r.group_id != group_id:
                continue
            if user_id is not None and r.user_id != user_id:
                continue
            out.append(r)
        return sorted(out, key=lambda x: (x.inspection_date, x.inspection_id))

    def list_recent(self, predicate, *, limit):
        rows = [r for r in self.all() if predicate.allows(branch_id=r.branch_id, group_id=r.group_id)]
        return sorted(rows, key=lambda x: x.inspection_id, reverse=True)[:limit]


class FakePerformanceRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self._records: dict[int, object] = {}
        self._next_id = 1
        self.fail_for: set[int] = set()

    def upsert(self, record):
        if record.user_id in self.fail_for:
            raise RuntimeError("Lock wait timeout exceeded")
        existing = next(
            (r for r in self._records.values() if (r.user_id, r.period) == (record.user_id, record.period)),
            None,
        )
        record_id = existing.record_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self._records[record_id] = replace(record, record_id=record_id)
        return record_id

    def update(self, record):
        if record.record_id not in self._records:
            return False
        self._records[record.record_id] = record
        return True

    def _joined(self, record):
        user = self._users.get_by_id(record.user_id)
        return replace(record, employee_name=user.name if user else None)

    def get(self, record_id):
        record = self._records.get(int(record_id))
        return self._joined(record) if record else None

    def list_visible(self, predicate, *, period=None, branch_id=None, group_id=None):
        out = []
        for r in self._records.values():
            if not predicate.allows(branch_id=r.branch_id, group_id=r.group_id):
                continue
            if period and r.period != period:
                continue
            if branch_id is not None and r.branch_id != branch_id:
                continue
            if group_id is not None and r.group_id != group_id:
                continue
            out.append(self._joined(r))
        return out

    def delete(self, record_id):
        return self._records.pop(int(record_id), None) is not None

    def all(self):
        return list(self._records.values())


def _user(user_id, name, email, role, branch_id, group_id, is_active=True) -> User:
    return User(user_id, name, email, _HASH, role, branch_id, group_id, is_active)


@pytest.fixture
def users_repo():
    return FakeUserRepo(
        [
            _user(1, "Quản trị", "admin@example.com", Role.ADMIN, None, None),
            _user(2, "Quản lý HN", "manager.hn@example.com", Role.MANAGER, 1, None),
            _user(3, "Quản lý HCM", "manager.hcm@example.com", Role.MANAGER, 2, None),
            _user(101, "Nguyễn An", "an@example.com", Role.EMPLOYEE, 1, 10),
            _user(102, "Trần Bình", "binh@example.com", Role.EMPLOYEE, 1, 10),
            _user(103, "Lê Cường", "cuong@example.com", Role.EMPLOYEE, 1, 11),
            _user(104, "Phạm Em", "em@example.com", Role.EMPLOYEE, 1, 10, is_active=False),
            _user(201, "Võ Dung", "dung@example.com", Role.EMPLOYEE, 2, 20),
        ]
    )


@pytest.fixture
def organization_repo():
    return FakeOrganizationRepo(
        [Branch(1, "Hà Nội", "HN"), Branch(2, "Hồ Chí Minh", "HCM")],
        [Group(10, 1, "Nhóm A", 2), Group(11, 1, "Nhóm B", 2), Group(20, 2, "Nhóm C", 3), Group(12, 1, "Nhóm rỗng")],
    )


@pytest.fixture
def inspections_repo(users_repo):
    return FakeInspectionRepo(users_repo)


@pytest.fixture
def performance_repo(users_repo):
    return FakePerformanceRepo(users_repo)


@pytest.fixture
def container(users_repo, organization_repo, inspections_repo, performance_repo):
    return wire_container(
        users_repo=users_repo,
        organization_repo=organization_repo,
        inspections_repo=inspections_repo,
        performance_repo=performance_repo,
    )


@pytest.fixture
def admin():
    return Principal(1, "Quản trị", "admin@example.com", Role.ADMIN, None, None)


@pytest.fixture
def manager_hn():
    return Principal(2, "Quản lý HN", "manager.hn@example.com", Role.MANAGER, 1, None)


@pytest.fixture
def manager_hcm():
    return Principal(3, "Quản lý HCM", "manager.hcm@example.com", Role.MANAGER, 2, None)


@pytest.fixture
def employee_an():
    return Principal(101, "Nguyễn An", "an@example.com", Role.EMPLOYEE, 1, 10)


@pytest.fixture
def password():
    return PASSWORD
