"""Tests for the health score engine."""

import pytest

from foodscan.domain.nutrition import ScoreOptions
from foodscan.domain.scoring import Grade
from foodscan.services.normalizer import normalize
from foodscan.services.scoring import (
    DEFAULT_SCORE_ENGINE,
    compute_health_score,
    diabetic_warning_line,
)


def test_wholesome_food_scores_excellent() -> None:
    result = compute_health_score(
        {
            "calories": 150,
            "sugar": 2,
            "fat": 3,
            "salt": 0.1,
            "protein": 20,
            "fiber": 10,
        }
    )

    assert result.score >= 85
    assert result.grade in {Grade.A, Grade.A_PLUS}
    assert result.penalties == ()
    assert {reward.kind for reward in result.rewards} == {
        "protein",
        "fiber",
        "optimal",
    }
    assert result.recommendation.startswith("Excellent choice!")


def test_junk_food_scores_poorly() -> None:
    result = compute_health_score(
        {
            "calories": 500,
            "sugar": 30,
            "fat": 35,
            "salt": 2.5,
            "protein": 3,
            "fiber": 0,
        }
    )

    assert result.score < 50
    assert result.grade in {Grade.D, Grade.F}
    kinds = [penalty.kind for penalty in result.penalties]
    assert kinds == ["calories", "sugar", "fat", "salt", "combination", "metabolic"]
    assert result.total_penalties == pytest.approx(80.06)
    assert result.score == 20
    assert "High in" in result.recommendation


def test_penalty_curves_are_capped() -> None:
    result = compute_health_score(
        {"calories": 900, "sugar": 100, "fat": 80, "salt": 10}
    )
    magnitudes = {penalty.kind: penalty.magnitude for penalty in result.penalties}

    assert magnitudes["calories"] == 25
    assert magnitudes["sugar"] == 30
    assert magnitudes["fat"] == 20
    assert magnitudes["salt"] == 15
    assert result.score == 0
    assert result.grade is Grade.F


def test_diabetic_multiplier_raises_sugar_penalty() -> None:
    nutrition = {"sugar": 12}
    standard = compute_health_score(nutrition)
    diabetic = compute_health_score(nutrition, ScoreOptions(is_diabetic=True))

    standard_sugar = standard.penalties[0].magnitude
    diabetic_sugar = diabetic.penalties[0].magnitude
    assert standard_sugar == pytest.approx(9.5)
    assert diabetic_sugar == pytest.approx(14.25)
    assert diabetic.score < standard.score


@pytest.mark.parametrize(
    "nutrition",
    [
        {},
        {"calories": 900, "sugar": 100, "fat": 80, "salt": 10},
        {"protein": 90, "fiber": 60, "calories": 50},
        {"calories": -10, "sugar": "n/a"},
    ],
)
def test_score_is_bounded(nutrition: dict[str, object]) -> None:
    result = compute_health_score(nutrition)

    assert 0 <= result.score <= 100


def test_grade_is_monotonic_in_score() -> None:
    ranks = [DEFAULT_SCORE_ENGINE.grade_for(score).grade.rank for score in range(101)]

    assert ranks == sorted(ranks)


def test_unreported_nutrients_are_surfaced() -> None:
    result = compute_health_score({"calories": 80, "protein": 6})

    assert "sugar" in result.unreported_nutrients
    assert "calories" not in result.unreported_nutrients
    assert any(reward.kind == "lowcal" for reward in result.rewards)


def test_scoring_is_deterministic() -> None:
    nutrition = {"calories": 320, "sugar": 14, "fat": 12, "salt": 0.9}

    assert compute_health_score(nutrition) == compute_health_score(nutrition)


@pytest.mark.parametrize(
    ("sugar", "calories", "prefix"),
    [
        (16, 100, "🚫 CRITICAL"),
        (11, 100, "⚠️ WARNING"),
        (6, 100, "⚡ CAUTION"),
        (2, 150, "✅ SAFE"),
    ],
)
def test_diabetic_warning_line(sugar: float, calories: float, prefix: str) -> None:
    line = diabetic_warning_line(
        normalize({"sugar": sugar, "calories": calories}), is_diabetic=True
    )

    assert line is not None
    assert line.startswith(prefix)


def test_diabetic_warning_line_gaps() -> None:
    assert diabetic_warning_line(normalize({"sugar": 4}), is_diabetic=True) is None
    assert diabetic_warning_line(normalize({"sugar": 30}), is_diabetic=False) is None
