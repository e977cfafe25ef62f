"""Tests for the product enricher."""

from foodscan.domain.diabetic import RiskLabel
from foodscan.domain.nutrition import Gender, NutritionRecord, ScoreOptions
from foodscan.domain.population import Suitability
from foodscan.services.enricher import ProductEnricher, assess_data_quality
from foodscan.services.normalizer import normalize
from foodscan.services.products import parse_product
from tests.conftest import COOKIE_BARCODE, cookie_product


def test_analyze_runs_every_engine() -> None:
    report = ProductEnricher().analyze(
        {"calories": 150, "sugar": 2, "fat": 3, "salt": 0.1, "protein": 20},
        {"gender": "female", "isDiabetic": "true"},
        {"ingredients_text": "chicken, salt"},
    )

    assert report.options.gender is Gender.FEMALE
    assert report.options.is_diabetic is True
    assert report.health_score.score >= 85
    assert report.daily_values.summary.gender_symbol == "♀"
    assert report.diabetic_warnings[0].kind == "sugar_safe"
    assert report.diabetic_risk.risk is RiskLabel.SAFE
    assert set(report.population) == {"pregnant", "child"}
    assert report.data_quality.quality == "excellent"


def test_analyze_limits_target_groups() -> None:
    report = ProductEnricher().analyze(
        {"sugar": 1}, target_groups=["child", "elderly"]
    )

    assert set(report.population) == {"child", "elderly"}
    assert report.population["elderly"].suitability is Suitability.INSUFFICIENT_DATA


def test_missing_nutrition_is_insufficient_for_populations() -> None:
    report = ProductEnricher().analyze(None)

    assert report.health_score.score == 100
    assert all(
        evaluation.suitability is Suitability.INSUFFICIENT_DATA
        for evaluation in report.population.values()
    )
    assert report.data_quality.quality == "poor"


def test_enrich_uses_product_metadata() -> None:
    product = parse_product(cookie_product(), COOKIE_BARCODE)

    enriched = ProductEnricher().enrich(product, ScoreOptions(is_diabetic=True))

    assert enriched.product is product
    assert enriched.report.health_score.score < 50
    assert enriched.report.diabetic_warnings[0].priority == 1
    child = enriched.report.population["child"]
    assert "Ultra-processed food - choose whole foods when possible" in child.warnings
    assert child.suitability is Suitability.AVOID


def test_data_quality_flags() -> None:
    assert assess_data_quality(NutritionRecord(calories=950, sugar=5)).quality == (
        "good"
    )
    poor = assess_data_quality(NutritionRecord(calories=100, sugar=120))
    assert poor.quality == "poor"
    assert poor.issues == ("Invalid sugar value (>100g/100g)",)
    missing = assess_data_quality(NutritionRecord())
    assert missing.issues == (
        "Missing calorie information",
        "Missing all macronutrient data",
    )


def test_data_quality_lists_unreported_core_nutrients() -> None:
    quality = assess_data_quality(normalize({"calories": 120, "sugar": 2}))

    assert quality.quality == "good"
    assert quality.issues == ("Not reported: fat, salt, protein",)
