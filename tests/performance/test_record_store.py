from __future__ import annotations

from dataclasses import replace

import pytest

from src.performance_system.performance_system.performance.model import PerformanceRecord
from src.performance_system.performance_system.performance.scoring.weighted_scorer import WeightedCompositeScorer
from src.performance_system.performance_system.performance.store import PerformanceRecordStore


def _record(**overrides) -> PerformanceRecord:
    base = dict(
        record_id=None,
        user_id=101,
        branch_id=1,
        group_id=10,
        period="2024-03",
        actual_attendance=20,
        required_attendance=22,
        annotation_score=85,
        onsite_performance=4,
        total_inspected=200,
        total_errors=10,
        deduction_points=5,
    )
    base.update(overrides)
    return PerformanceRecord(**base)


@pytest.fixture
def store(performance_repo):
    return PerformanceRecordStore(performance_repo, WeightedCompositeScorer())


def test_insert_computes_score(store):
    record_id = store.upsert(_record(final_score=0))
    assert store.get(record_id).final_score == pytest.approx(84.1818, abs=1e-4)


def test_upsert_same_employee_and_period_overwrites(store, performance_repo):
    first = store.upsert(_record())
    second = store.upsert(_record(deduction_points=0))

    assert first == second
    assert len(performance_repo.all()) == 1
    assert store.get(first).final_score == pytest.approx(89.1818, abs=1e-4)


def test_update_recomputes_from_new_fields(store):
    record_id = store.upsert(_record())
    record = store.get(record_id)

    store.update(replace(record, bonus_points=10, final_score=1.0))

    assert store.get(record_id).final_score == pytest.approx(94.1818, abs=1e-4)


def test_update_needs_record_id(store):
    with pytest.raises(ValueError):
        store.update(_record())


def test_decimal_inputs_are_rounded_before_scoring(store):
    record_id = store.upsert(_record(annotation_score=85.555, bonus_points=1.004))
    stored = store.get(record_id)

    assert stored.annotation_score == pytest.approx(85.56)
    assert stored.bonus_points == pytest.approx(1.0)
    assert stored.final_score == pytest.approx(WeightedCompositeScorer().score(stored.scoring_inputs()))
