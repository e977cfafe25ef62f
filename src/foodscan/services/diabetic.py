"""Diabetic warnings, risk assessment and glucose impact estimation.

The warning list and the risk score are two separate views: the list drives
what is displayed, the score is a coarse single number. They are allowed to
disagree.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from foodscan.domain.diabetic import (
    DiabeticRisk,
    DiabeticWarning,
    GlucoseImpact,
    GlycemicImpact,
    RiskLabel,
    Severity,
)
from foodscan.domain.nutrition import DiabeticType, NutritionRecord, round_half_up
from foodscan.services.normalizer import normalize


@dataclass(frozen=True)
class SugarBand:
    """Sugar-driven warning applied when sugar exceeds ``above``."""

    above: float
    severity: Severity
    kind: str
    title: str
    message: str
    detail: str
    impact: str
    action: str
    glycemic_impact: GlycemicImpact


# Checked top-down; the first band whose lower bound is exceeded wins.
SUGAR_BANDS: tuple[SugarBand, ...] = (
    SugarBand(
        above=20,
        severity=Severity.CRITICAL,
        kind="sugar_critical",
        title="CRITICAL SUGAR LEVEL",
        message="Extremely high sugar content: {sugar:.1f}g per 100g",
        detail="May cause severe blood glucose spike. Avoid completely.",
        impact="Blood glucose may rise by 150-200+ mg/dL",
        action="DO NOT CONSUME - Consult healthcare provider",
        glycemic_impact=GlycemicImpact.VERY_HIGH,
    ),
    SugarBand(
        above=15,
        severity=Severity.HIGH,
        kind="sugar_high",
        title="HIGH SUGAR WARNING",
        message="Very high sugar content: {sugar:.1f}g per 100g",
        detail="Will significantly raise blood glucose levels.",
        impact="Blood glucose may rise by 100-150 mg/dL",
        action="Avoid or consume minimal amount with insulin adjustment",
        glycemic_impact=GlycemicImpact.HIGH,
    ),
    SugarBand(
        above=10,
        severity=Severity.MODERATE,
        kind="sugar_moderate",
        title="MODERATE SUGAR ALERT",
        message="Elevated sugar content: {sugar:.1f}g per 100g",
        detail="Will raise blood glucose levels noticeably.",
        impact="Blood glucose may rise by 50-100 mg/dL",
        action="Limit portion size, monitor glucose closely",
        glycemic_impact=GlycemicImpact.MODERATE,
    ),
    SugarBand(
        above=5,
        severity=Severity.LOW,
        kind="sugar_low",
        title="Sugar Content Notice",
        message="Moderate sugar: {sugar:.1f}g per 100g",
        detail="May cause mild blood glucose increase.",
        impact="Blood glucose may rise by 20-50 mg/dL",
        action="Consume in small portions, pair with protein/fiber",
        glycemic_impact=GlycemicImpact.LOW,
    ),
    SugarBand(
        above=float("-inf"),
        severity=Severity.SAFE,
        kind="sugar_safe",
        title="Low Sugar - Diabetic Friendly",
        message="Low sugar content: {sugar:.1f}g per 100g",
        detail="Minimal impact on blood glucose levels.",
        impact="Blood glucose rise: <20 mg/dL",
        action="Safe for consumption in normal portions",
        glycemic_impact=GlycemicImpact.VERY_LOW,
    ),
)


@dataclass(frozen=True)
class DiabeticWarningEngine:
    """Builds the prioritized warning list for diabetic users."""

    sugar_bands: tuple[SugarBand, ...] = SUGAR_BANDS

    def warnings(
        self,
        nutrition: NutritionRecord,
        *,
        is_diabetic: bool,
        diabetic_type: DiabeticType = DiabeticType.TYPE2,
    ) -> list[DiabeticWarning]:
        """Return warnings sorted by priority, most urgent first."""
        if not is_diabetic:
            return []

        n = nutrition
        carbs = n.carbs or n.sugar
        warnings: list[DiabeticWarning] = []

        band = self._sugar_band(n.sugar)
        if band is not None:
            warnings.append(
                DiabeticWarning(
                    severity=band.severity,
                    kind=band.kind,
                    title=band.title,
                    message=band.message.format(sugar=n.sugar),
                    detail=band.detail,
                    impact=band.impact,
                    action=band.action,
                    glycemic_impact=band.glycemic_impact,
                )
            )

        if carbs > 50:
            warnings.append(
                DiabeticWarning(
                    severity=Severity.HIGH,
                    kind="carb_high",
                    title="High Carbohydrate Content",
                    message=f"Carbohydrates: {carbs:.1f}g per 100g",
                    detail="High carb foods require careful glucose monitoring.",
                    action="Calculate insulin dose if on insulin therapy",
                )
            )
        if n.fat > 20 and n.sugar > 10:
            warnings.append(
                DiabeticWarning(
                    severity=Severity.CRITICAL,
                    kind="combination_danger",
                    title="DANGEROUS COMBINATION",
                    message="High fat + high sugar detected",
                    detail=(
                        "This combination delays glucose absorption and causes "
                        "prolonged elevated blood sugar."
                    ),
                    impact="Extended blood glucose elevation (4-6 hours)",
                    action="Avoid completely - Very high risk for diabetics",
                )
            )
        if n.calories > 500:
            warnings.append(
                DiabeticWarning(
                    severity=Severity.MODERATE,
                    kind="calorie_high",
                    title="Very High Calorie Density",
                    message=f"{n.calories:g} kcal per 100g - Ultra-processed food",
                    detail="High calorie density may affect insulin sensitivity.",
                    action="Consume very small portions if at all",
                )
            )
        if n.salt > 1.5:
            warnings.append(
                DiabeticWarning(
                    severity=Severity.MODERATE,
                    kind="salt_high",
                    title="High Salt Content",
                    message=f"Salt: {n.salt:.2f}g per 100g",
                    detail=(
                        "Diabetics have higher risk of hypertension. "
                        "High salt intake increases cardiovascular risk."
                    ),
                    action="Choose low-sodium alternatives",
                )
            )
        if n.fiber >= 8 and n.sugar < 5:
            warnings.append(
                DiabeticWarning(
                    severity=Severity.SAFE,
                    kind="fiber_good",
                    title="High Fiber Benefit",
                    message=f"Excellent fiber content: {n.fiber:.1f}g per 100g",
                    detail=(
                        "Fiber helps slow glucose absorption and improve "
                        "blood sugar control."
                    ),
                    action="Great choice for diabetic diet!",
                )
            )
        if n.protein >= 15 and n.sugar < 5:
            warnings.append(
                DiabeticWarning(
                    severity=Severity.SAFE,
                    kind="protein_good",
                    title="High Protein Benefit",
                    message=f"Good protein content: {n.protein:.1f}g per 100g",
                    detail="Protein helps stabilize blood sugar levels.",
                    action="Excellent choice for blood sugar management",
                )
            )
        if n.sugar < 3 and n.calories < 200 and n.fiber >= 5:
            warnings.append(
                DiabeticWarning(
                    severity=Severity.SAFE,
                    kind="ideal_diabetic",
                    title="IDEAL DIABETIC FOOD",
                    message="Perfect nutritional profile for diabetes management",
                    detail="Low sugar, moderate calories, good fiber content.",
                    action="Highly recommended for regular consumption",
                )
            )
        if diabetic_type is DiabeticType.TYPE1 and n.sugar > 10:
            warnings.append(
                DiabeticWarning(
                    severity=Severity.HIGH,
                    kind="type1_specific",
                    title="Type 1 Diabetes Alert",
                    message="Requires precise insulin calculation",
                    detail=(
                        f"Estimated carbs: {round_half_up(carbs)}g - "
                        "Consult carb counting guide"
                    ),
                    action="Calculate bolus insulin dose before consuming",
                )
            )

        # sorted() is stable, so equal priorities keep insertion order.
        return sorted(warnings, key=lambda warning: warning.priority)

    def _sugar_band(self, sugar: float) -> SugarBand | None:
        for band in self.sugar_bands:
            if sugar > band.above:
                return band
        return None


def assess_diabetic_risk(nutrition: NutritionRecord, is_diabetic: bool) -> DiabeticRisk:
    """Score diabetic risk 0-100 from sugar and fat thresholds."""
    if not is_diabetic:
        return DiabeticRisk(
            risk=RiskLabel.NOT_APPLICABLE,
            score=0,
            recommendation="Diabetic assessment not enabled",
        )

    sugar = nutrition.sugar
    fat = nutrition.fat
    score = 0
    if sugar > 20:
        score += 50
    elif sugar > 15:
        score += 35
    elif sugar > 10:
        score += 20
    elif sugar > 5:
        score += 10

    if fat > 30:
        score += 20
    elif fat > 20:
        score += 10

    if sugar > 10 and fat > 20:
        score += 20

    if score >= 70:
        return DiabeticRisk(
            RiskLabel.CRITICAL,
            score,
            "Avoid completely - High risk of severe glucose spike",
        )
    if score >= 40:
        return DiabeticRisk(
            RiskLabel.HIGH,
            score,
            "Not recommended - Significant glucose impact expected",
        )
    if score >= 20:
        return DiabeticRisk(
            RiskLabel.MODERATE,
            score,
            "Consume cautiously - Monitor glucose closely",
        )
    if score >= 10:
        return DiabeticRisk(RiskLabel.LOW, score, "Acceptable in small portions")
    return DiabeticRisk(RiskLabel.SAFE, score, "Safe for diabetic consumption")


def estimate_glucose_impact(nutrition: NutritionRecord) -> GlucoseImpact:
    """Estimate blood glucose rise (mg/dL) per 100g from net carbs."""
    n = nutrition
    carbs = n.carbs or n.sugar
    net_carbs = max(0.0, carbs - n.fiber)
    rise = net_carbs * 4
    if n.fat > 10:
        rise *= 0.8
    if n.protein > 20:
        rise *= 0.9
    if n.fiber > 5:
        rise *= 0.85

    if n.fat > 10:
        speed, duration = "slow", "4-6 hours"
    elif n.sugar > 10:
        speed, duration = "fast", "1-2 hours"
    else:
        speed, duration = "moderate", "2-3 hours"

    return GlucoseImpact(
        estimated_rise=round_half_up(rise),
        net_carbs=round_half_up(net_carbs * 10) / 10,
        absorption_speed=speed,
        duration=duration,
    )


DEFAULT_DIABETIC_ENGINE = DiabeticWarningEngine()


def compute_diabetic_warnings(
    nutrition: Mapping[str, object] | NutritionRecord | None,
    *,
    is_diabetic: bool,
    diabetic_type: DiabeticType = DiabeticType.TYPE2,
) -> list[DiabeticWarning]:
    """Normalize the input and build its diabetic warning list."""
    if not is_diabetic:
        return []
    return DEFAULT_DIABETIC_ENGINE.warnings(
        normalize(nutrition), is_diabetic=True, diabetic_type=diabetic_type
    )


def compute_diabetic_risk(
    nutrition: Mapping[str, object] | NutritionRecord | None, is_diabetic: bool
) -> DiabeticRisk:
    """Normalize the input and assess its diabetic risk."""
    return assess_diabetic_risk(normalize(nutrition), is_diabetic)
