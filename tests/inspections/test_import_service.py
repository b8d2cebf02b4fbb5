from __future__ import annotations

from datetime import date
from itertools import permutations

import pytest

from src.performance_system.performance_system.core.enums import Role
from src.performance_system.performance_system.core.exceptions import (
    AuthorizationError,
    ImportFormatError,
    NotFoundError,
)
from src.performance_system.performance_system.container import wire_container
from src.performance_system.performance_system.users.model import User

HEADER = "日期,姓名,主题,批次,数量,错误\n"


def test_unmatched_name_is_reported_and_others_saved(container, admin, inspections_repo):
    text = HEADER + (
        "2024-03-05,Nguyễn An,Ảnh,Lô 1,100,3\n"
        "2024-03-05,佚名,Ảnh,Lô 1,10,0\n"
        "2024-03-06,Trần Bình,Ảnh,Lô 1,50,1\n"
    )
    result = container.import_service.import_text(admin, branch_id=1, text=text)

    assert result.to_dict() == {"success": 2, "failed": 1, "errors": ["Không tìm thấy nhân viên: 佚名"]}
    assert len(inspections_repo.all()) == 2


def test_rows_with_same_key_are_summed(container, admin, inspections_repo):
    text = (
        "2024-03-05,Nguyễn An,Ảnh,Lô 1,100,3\n"
        "2024-03-05,Nguyễn An,Văn bản,Lô 1,40,2\n"
        "2024-03-05,Nguyễn An,Ảnh,Lô 2,7,0\n"
    )
    result = container.import_service.import_text(admin, branch_id=1, text=text)

    assert (result.success, result.failed) == (2, 0)
    rows = {r.batch_name: r for r in inspections_repo.all()}
    assert (rows["Lô 1"].inspected_count, rows["Lô 1"].error_count) == (140, 5)
    assert rows["Lô 1"].topic == "Ảnh"


def test_reimport_replaces_stored_counts(container, admin, inspections_repo):
    line = "2024-03-05,Nguyễn An,Ảnh,Lô 1,{n},0\n"
    container.import_service.import_text(admin, branch_id=1, text=line.format(n=100))
    container.import_service.import_text(admin, branch_id=1, text=line.format(n=30))

    (row,) = inspections_repo.all()
    assert row.inspected_count == 30


def test_email_resolves_before_name(container, admin, inspections_repo):
    container.import_service.import_text(admin, branch_id=1, text="2024-03-05,binh@example.com,Ảnh,Lô 1,5,0\n")
    (row,) = inspections_repo.all()
    assert row.user_id == 102


def test_name_match_is_case_sensitive_and_branch_local(container, admin):
    text = "2024-03-05,nguyễn an,Ảnh,Lô 1,5,0\n2024-03-05,Võ Dung,Ảnh,Lô 1,5,0\n"
    result = container.import_service.import_text(admin, branch_id=1, text=text)

    assert result.success == 0
    assert result.errors == ["Không tìm thấy nhân viên: nguyễn an", "Không tìm thấy nhân viên: Võ Dung"]


def test_duplicate_name_in_branch_is_flagged(container, admin, users_repo, inspections_repo):
    users_repo._users[105] = User(105, "Nguyễn An", "an2@example.com", "x", Role.EMPLOYEE, 1, 11)

    result = container.import_service.import_text(admin, branch_id=1, text="2024-03-05,Nguyễn An,Ảnh,Lô 1,5,0\n")

    assert result.failed == 1
    assert result.errors == ["Tên nhân viên bị trùng trong chi nhánh: Nguyễn An"]
    assert inspections_repo.all() == []


def test_bad_date_is_a_row_error(container, admin):
    text = "2024-03-05,Nguyễn An,Ảnh,Lô 1,5,0\n2024-13-45,Trần Bình,Ảnh,Lô 1,5,0\n"
    result = container.import_service.import_text(admin, branch_id=1, text=text)

    assert (result.success, result.failed) == (1, 1)
    assert result.errors == ["Ngày không hợp lệ: 2024-13-45"]


def test_persistence_failure_is_per_aggregate(container, admin, inspections_repo):
    inspections_repo.fail_for.add(101)
    text = "2024-03-05,Nguyễn An,Ảnh,Lô 1,5,0\n2024-03-05,Trần Bình,Ảnh,Lô 1,5,0\n"

    result = container.import_service.import_text(admin, branch_id=1, text=text)

    assert (result.success, result.failed) == (1, 1)
    assert result.errors[0].startswith("Nhập thất bại: ")


def test_error_list_is_truncated(container, admin):
    text = "".join(f"2024-03-05,Không ai {i},Ảnh,Lô 1,5,0\n" for i in range(15))
    result = container.import_service.import_text(admin, branch_id=1, text=text)

    assert result.failed == 15
    assert len(result.errors) == 10


def test_manager_cannot_import_into_other_branch(container, manager_hcm):
    with pytest.raises(AuthorizationError):
        container.import_service.import_text(manager_hcm, branch_id=1, text="2024-03-05,Nguyễn An,Ảnh,Lô 1,5,0\n")


def test_employee_cannot_import(container, employee_an):
    with pytest.raises(AuthorizationError):
        container.import_service.import_text(employee_an, branch_id=1, text="2024-03-05,Nguyễn An,Ảnh,Lô 1,5,0\n")


def test_unknown_branch(container, admin):
    with pytest.raises(NotFoundError):
        container.import_service.import_text(admin, branch_id=99, text="2024-03-05,Nguyễn An,Ảnh,Lô 1,5,0\n")


def test_unreadable_workbook_raises_format_error(container, admin):
    with pytest.raises(ImportFormatError):
        container.import_service.import_file(admin, branch_id=1, filename="qc.xlsx", content=b"not a workbook")


def test_csv_upload(container, manager_hn, inspections_repo):
    content = (HEADER + "2024/3/5,Lê Cường,Ảnh,Lô 9,12,1\n").encode("utf-8")
    result = container.import_service.import_file(manager_hn, branch_id=1, filename="qc.csv", content=content)

    assert result.success == 1
    (row,) = inspections_repo.all()
    assert row.inspection_date == date(2024, 3, 5)
    assert row.branch_id == 1


def test_result_does_not_depend_on_row_order(users_repo, organization_repo, inspections_repo, performance_repo, admin):
    lines = [
        "2024-03-05,Nguyễn An,Ảnh,Lô 1,100,3\n",
        "2024-03-05,Nguyễn An,Văn bản,Lô 1,40,2\n",
        "2024-03-06,Trần Bình,Ảnh,Lô 2,50,1\n",
        "2024-03-05,佚名,Ảnh,Lô 1,10,0\n",
    ]
    outcomes = set()
    for ordering in permutations(lines):
        repo = type(inspections_repo)(users_repo)
        container = wire_container(
            users_repo=users_repo,
            organization_repo=organization_repo,
            inspections_repo=repo,
            performance_repo=performance_repo,
        )
        result = container.import_service.import_text(admin, branch_id=1, text="".join(ordering))
        stored = frozenset(
            (r.user_id, r.inspection_date, r.batch_name, r.inspected_count, r.error_count) for r in repo.all()
        )
        outcomes.add((result.success, result.failed, stored))

    assert len(outcomes) == 1
    ((success, failed, stored),) = outcomes
    assert (success, failed) == (2, 1)
    assert (101, date(2024, 3, 5), "Lô 1", 140, 5) in stored
