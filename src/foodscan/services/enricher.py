"""Runs every engine over a nutrition record and merges the results."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from foodscan.domain.nutrition import NutritionRecord, ScoreOptions, TargetGroup
from foodscan.domain.population import ProductMeta
from foodscan.domain.product import (
    DataQuality,
    EnrichedProduct,
    NutritionReport,
    ProductRecord,
)
from foodscan.services.daily_values import DEFAULT_DAILY_VALUE_ENGINE, DailyValueEngine
from foodscan.services.diabetic import (
    DEFAULT_DIABETIC_ENGINE,
    DiabeticWarningEngine,
    assess_diabetic_risk,
    estimate_glucose_impact,
)
from foodscan.services.normalizer import normalize
from foodscan.services.population import (
    DEFAULT_POPULATION_ENGINE,
    PopulationSafetyEngine,
)
from foodscan.services.scoring import DEFAULT_SCORE_ENGINE, ScoreEngine

DEFAULT_TARGET_GROUPS = (TargetGroup.PREGNANT, TargetGroup.CHILD)

MAX_PLAUSIBLE_CALORIES = 900
MAX_PLAUSIBLE_GRAMS = 100
CORE_NUTRIENTS = ("calories", "sugar", "fat", "salt", "protein")


def assess_data_quality(nutrition: NutritionRecord) -> DataQuality:
    """Flag missing or implausible values in a nutrition record.

    Core nutrients that were not reported cap the quality at ``good``.
    """
    issues: list[str] = []
    poor = False
    unreported = nutrition.unreported_among(CORE_NUTRIENTS)
    if unreported:
        issues.append(f"Not reported: {', '.join(unreported)}")
    if nutrition.calories == 0:
        issues.append("Missing calorie information")
        poor = True
    if nutrition.sugar == 0 and nutrition.fat == 0 and nutrition.protein == 0:
        issues.append("Missing all macronutrient data")
        poor = True
    if nutrition.calories > MAX_PLAUSIBLE_CALORIES:
        issues.append("Unusually high calories (>900 kcal/100g)")
    if nutrition.sugar > MAX_PLAUSIBLE_GRAMS:
        issues.append("Invalid sugar value (>100g/100g)")
        poor = True

    if not issues:
        return DataQuality(quality="excellent", issues=())
    return DataQuality(quality="poor" if poor else "good", issues=tuple(issues))


@dataclass(frozen=True)
class ProductEnricher:
    """Combines the scoring, daily value, diabetic and population engines."""

    score_engine: ScoreEngine = DEFAULT_SCORE_ENGINE
    daily_value_engine: DailyValueEngine = DEFAULT_DAILY_VALUE_ENGINE
    diabetic_engine: DiabeticWarningEngine = DEFAULT_DIABETIC_ENGINE
    population_engine: PopulationSafetyEngine = DEFAULT_POPULATION_ENGINE

    def analyze(
        self,
        nutrition: NutritionRecord | Mapping[str, object] | None,
        options: ScoreOptions | Mapping[str, object] | None = None,
        product_meta: ProductMeta | Mapping[str, object] | None = None,
        target_groups: Iterable[TargetGroup | str] = DEFAULT_TARGET_GROUPS,
    ) -> NutritionReport:
        """Build a report for raw or normalized nutrition facts."""
        record = normalize(nutrition)
        resolved = (
            options
            if isinstance(options, ScoreOptions)
            else ScoreOptions.from_mapping(options)
        )
        meta = (
            product_meta
            if isinstance(product_meta, ProductMeta)
            else ProductMeta.from_mapping(product_meta)
        )
        # missing nutrition stays missing for the population rules
        evaluated = (
            record if isinstance(nutrition, (NutritionRecord, Mapping)) else None
        )
        population = {}
        for group in target_groups:
            evaluation = self.population_engine.evaluate(evaluated, group, meta)
            population[evaluation.target_group] = evaluation

        return NutritionReport(
            options=resolved,
            nutrition=record,
            health_score=self.score_engine.score(record, resolved),
            daily_values=self.daily_value_engine.report(record, resolved),
            diabetic_warnings=tuple(
                self.diabetic_engine.warnings(
                    record,
                    is_diabetic=resolved.is_diabetic,
                    diabetic_type=resolved.diabetic_type,
                )
            ),
            diabetic_risk=assess_diabetic_risk(record, resolved.is_diabetic),
            glucose_impact=estimate_glucose_impact(record),
            population=population,
            data_quality=assess_data_quality(record),
        )

    def enrich(
        self,
        product: ProductRecord,
        options: ScoreOptions | Mapping[str, object] | None = None,
        target_groups: Iterable[TargetGroup | str] = DEFAULT_TARGET_GROUPS,
    ) -> EnrichedProduct:
        """Attach a nutrition report to a looked-up product."""
        report = self.analyze(
            product.nutrition, options, product.meta(), target_groups
        )
        return EnrichedProduct(product=product, report=report)
