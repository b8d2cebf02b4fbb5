from __future__ import annotations

from datetime import date

import pytest

from src.performance_system.performance_system.core.enums import BatchField
from src.performance_system.performance_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.performance_system.performance_system.performance.generation import GenerationSession


@pytest.fixture
def gen(container):
    return container.generation_service


def _loaded(gen, principal, group_id=10, period="2024-03"):
    session = gen.open_session(principal, period=period)
    return gen.load_roster(principal, session, group_id)


def test_roster_seeds_defaults_and_month_qc(gen, admin, inspections_repo):
    inspections_repo.add(user_id=101, branch_id=1, inspection_date=date(2024, 3, 3), inspected_count=80, error_count=4)

    session = _loaded(gen, admin)

    assert set(session.rows) == {101, 102}  # inactive 104 is left out
    an = session.row(101)
    assert (an.actual_attendance, an.required_attendance) == (22, 22)
    assert (an.annotation_score, an.onsite_performance) == (80, 3)
    assert (an.total_inspected, an.total_errors) == (80, 4)
    assert session.row(102).total_inspected == 0
    assert session.branch_id == 1


def test_empty_group_gives_empty_roster_and_commit_is_rejected(gen, admin, performance_repo):
    session = _loaded(gen, admin, group_id=12)

    assert session.rows == {}
    with pytest.raises(ValidationError):
        gen.commit(admin, session)
    assert performance_repo.all() == []


def test_commit_without_group_is_rejected(gen, admin):
    with pytest.raises(ValidationError):
        gen.commit(admin, GenerationSession(period="2024-03"))


def test_zero_selected_is_rejected_before_any_write(gen, admin, performance_repo):
    session = _loaded(gen, admin)
    session.select_all(False)

    with pytest.raises(ValidationError):
        gen.commit(admin, session)
    assert performance_repo.all() == []


def test_commit_persists_selected_rows_only(gen, manager_hn, performance_repo):
    session = _loaded(gen, manager_hn)
    session.set_selected(102, False)

    result = gen.commit(manager_hn, session)

    assert result.to_dict() == {"success": 1, "failed": 0, "failed_names": [], "sample_error": None}
    (record,) = performance_repo.all()
    assert (record.user_id, record.branch_id, record.group_id, record.period) == (101, 1, 10, "2024-03")
    assert record.final_score == pytest.approx(88.0)


def test_recommit_overwrites_instead_of_duplicating(gen, admin, performance_repo):
    session = _loaded(gen, admin)
    gen.commit(admin, session)
    session.update_row(101, bonus_points=5)
    gen.commit(admin, session)

    records = {r.user_id: r for r in performance_repo.all()}
    assert len(records) == 2
    assert records[101].final_score == pytest.approx(93.0)


def test_partial_failure_is_reported(gen, admin, performance_repo):
    performance_repo.fail_for.add(102)
    session = _loaded(gen, admin)

    result = gen.commit(admin, session)

    assert (result.success, result.failed) == (1, 1)
    assert result.failed_names == ["Trần Bình"]
    assert "Lock wait timeout" in result.sample_error


def test_batch_values_respect_applicable_flag(gen, admin):
    session = _loaded(gen, admin)
    session.set_batch_applicable(102, False)

    touched = session.apply_batch(BatchField.ONSITE, 5)
    session.apply_batch(BatchField.ATTENDANCE, 18)

    assert touched == 1
    assert session.row(101).onsite_performance == 5
    assert session.row(102).onsite_performance == 3
    assert session.row(101).actual_attendance == 18
    assert session.row(101).required_attendance == 18
    assert session.row(102).required_attendance == 22


def test_batch_flag_is_independent_of_selection(gen, admin):
    session = _loaded(gen, admin)
    session.set_selected(101, False)

    session.apply_batch(BatchField.BONUS, 4)

    assert session.row(101).bonus_points == 4
    assert session.row(101).selected is False


def test_batch_value_is_validated(gen, admin):
    session = _loaded(gen, admin)
    with pytest.raises(ValidationError):
        session.apply_batch(BatchField.ONSITE, 9)


def test_preview_sorts_descending_without_writing(gen, admin, performance_repo):
    session = _loaded(gen, admin)
    session.update_row(102, annotation_score=100)

    preview = gen.preview(session)

    assert [p.row.user_id for p in preview] == [102, 101]
    assert preview[0].score == pytest.approx(92.0)
    assert list(session.rows) == [102, 101]
    assert performance_repo.all() == []


def test_reload_replaces_rows_wholesale(gen, admin):
    session = _loaded(gen, admin)
    session.update_row(101, bonus_points=10)

    gen.load_roster(admin, session, 11)

    assert set(session.rows) == {103}


def test_manager_is_pinned_to_own_branch(gen, manager_hn):
    session = gen.open_session(manager_hn, period="2024-03", branch_id=2)
    assert session.branch_id == 1
    with pytest.raises(AuthorizationError):
        gen.load_roster(manager_hn, session, 20)


def test_employee_cannot_open_session(gen, employee_an):
    with pytest.raises(AuthorizationError):
        gen.open_session(employee_an, period="2024-03")


def test_restore_session_keeps_only_submitted_rows(gen, admin):
    session = gen.restore_session(
        admin,
        period="2024-03",
        group_id=10,
        rows=[{"user_id": 102, "name": "ignored", "onsite_performance": 4, "selected": True, "score": 1}],
    )

    assert list(session.rows) == [102]
    assert session.row(102).onsite_performance == 4
    assert session.row(102).name == "Trần Bình"


def test_restore_session_rejects_employee_outside_roster(gen, admin):
    with pytest.raises(NotFoundError):
        gen.restore_session(admin, period="2024-03", group_id=10, rows=[{"user_id": 103}])


@pytest.mark.parametrize("flags", [{"selected": "false"}, {"batch_applicable": 0}, {"selected": None}])
def test_restore_session_rejects_non_boolean_flags(gen, admin, flags):
    with pytest.raises(ValidationError):
        gen.restore_session(admin, period="2024-03", group_id=10, rows=[{"user_id": 102, **flags}])


def test_restore_session_flags_default_to_true(gen, admin):
    session = gen.restore_session(admin, period="2024-03", group_id=10, rows=[{"user_id": 101}])

    assert session.row(101).selected is True
    assert session.row(101).batch_applicable is True


def test_update_row_rejects_non_finite_numbers(gen, admin):
    session = _loaded(gen, admin)

    with pytest.raises(ValidationError):
        session.update_row(101, annotation_score="nan")
