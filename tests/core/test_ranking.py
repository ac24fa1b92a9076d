from __future__ import annotations

from typing import Any

import pendulum
import pytest

from concours.core import RankingEngine, WrittenExamResults, within_capacity
from concours.schemas import Applicant, ScoreConfig


def build_applicant(applicant_id: str, **kwargs: Any) -> Applicant:
    defaults: dict[str, Any] = {
        "id": applicant_id,
        "password": "secret12",
        "email": f"{applicant_id.lower()}@example.tn",
        "full_name": f"Applicant {applicant_id}",
        "target_position_number": "P-01",
        "status": "accepted",
        "submitted_at": pendulum.datetime(2026, 1, 10, tz="UTC"),
    }
    defaults.update(kwargs)
    return Applicant(**defaults)


def test_rank_filters_position_and_status_and_orders_by_score():
    applicants = [
        build_applicant("A", bac_average=12, grad_average=12),
        build_applicant("B", bac_average=16, grad_average=15),
        build_applicant("C", bac_average=18, grad_average=18, status="pending"),
        build_applicant("D", bac_average=19, grad_average=19, target_position_number="P-02"),
        build_applicant("E", bac_average=14, grad_average=13),
        build_applicant("F", bac_average=20, grad_average=20, status="rejected"),
    ]

    rows = RankingEngine().rank("P-01", applicants, ScoreConfig(written_exam_count=2))

    assert [row.applicant_id for row in rows] == ["B", "E", "A"]
    assert [row.rank for row in rows] == [1, 2, 3]
    assert [row.is_retained for row in rows] == [True, True, False]
    assert rows[0].score == pytest.approx(16 * 0.4 + 15 * 0.6)


def test_rank_is_stable_for_equal_scores():
    applicants = [
        build_applicant(name, bac_average=14, grad_average=14) for name in ["X", "Y", "Z", "W"]
    ]
    engine = RankingEngine()
    config = ScoreConfig()

    first = [row.applicant_id for row in engine.rank("P-01", applicants, config)]
    second = [row.applicant_id for row in engine.rank("P-01", applicants, config)]

    assert first == ["X", "Y", "Z", "W"]
    assert second == first


def test_rank_assigns_gapless_ranks():
    applicants = [
        build_applicant(str(index), bac_average=index % 4, grad_average=10) for index in range(9)
    ]

    rows = RankingEngine().rank("P-01", applicants, ScoreConfig())

    assert [row.rank for row in rows] == list(range(1, 10))


def test_zero_written_capacity_retains_nobody():
    applicants = [build_applicant(str(index), bac_average=15) for index in range(5)]

    rows = RankingEngine().rank("P-01", applicants, ScoreConfig(written_exam_count=0))

    assert len(rows) == 5
    assert not any(row.is_retained for row in rows)


def test_rank_without_eligible_applicants_is_empty():
    applicants = [build_applicant("A", status="pending")]

    assert RankingEngine().rank("P-01", applicants, ScoreConfig()) == []
    assert RankingEngine().rank("P-99", [], ScoreConfig()) == []


def test_ranking_follows_configuration_changes():
    applicants = [
        build_applicant("BAC", bac_average=18, grad_average=10),
        build_applicant("GRAD", bac_average=10, grad_average=18),
    ]
    engine = RankingEngine()

    bac_first = engine.rank("P-01", applicants, ScoreConfig(bac_weight=80, grad_weight=20))
    grad_first = engine.rank("P-01", applicants, ScoreConfig(bac_weight=20, grad_weight=80))

    assert bac_first[0].applicant_id == "BAC"
    assert grad_first[0].applicant_id == "GRAD"


def test_within_capacity_bounds():
    assert within_capacity(1, 1)
    assert within_capacity(3, 3)
    assert not within_capacity(4, 3)
    assert not within_capacity(0, 3)
    assert not within_capacity(1, 0)


def test_global_ranking_spans_positions_and_statuses_without_funnel_flags():
    applicants = [
        build_applicant("A", bac_average=10, status="pending"),
        build_applicant("B", bac_average=18, target_position_number="P-02"),
        build_applicant("C", bac_average=14, status="rejected"),
    ]

    rows = RankingEngine().global_ranking(applicants, ScoreConfig())

    assert [row.applicant_id for row in rows] == ["B", "C", "A"]
    assert all(row.is_retained is None for row in rows)


def test_oral_stage_ranks_retained_population_by_stage_key():
    applicants = [
        build_applicant("A", bac_average=19, grad_average=19),
        build_applicant("B", bac_average=17, grad_average=17),
        build_applicant("C", bac_average=15, grad_average=15),
        build_applicant("D", bac_average=12, grad_average=12),
    ]
    results = WrittenExamResults({"A": 9, "B": "14,5", "C": 12, "D": 20})
    config = ScoreConfig(written_exam_count=3, oral_exam_count=2)

    rows = RankingEngine().rank_oral_stage("P-01", applicants, config, results)

    # D is outside the written funnel despite the best mark
    assert [row.applicant_id for row in rows] == ["B", "C", "A"]
    assert [row.written_rank for row in rows] == [2, 3, 1]
    assert [row.is_retained for row in rows] == [True, True, False]
    assert rows[0].stage_score == pytest.approx(14.5)


def test_oral_stage_skips_missing_results_and_is_empty_without_key():
    applicants = [
        build_applicant("A", bac_average=19),
        build_applicant("B", bac_average=17),
    ]
    config = ScoreConfig(written_exam_count=5, oral_exam_count=5)
    engine = RankingEngine()

    rows = engine.rank_oral_stage("P-01", applicants, config, WrittenExamResults({"B": 11}))

    assert [row.applicant_id for row in rows] == ["B"]
    assert engine.rank_oral_stage("P-01", applicants, config, None) == []
