"""General health score engine."""

import math
from collections.abc import Mapping
from dataclasses import dataclass

from foodscan.domain.nutrition import NutritionRecord, ScoreOptions, round_half_up
from foodscan.domain.scoring import (
    Grade,
    GradeBand,
    NutritionProfile,
    PenaltyEntry,
    RewardEntry,
    ScoreResult,
)
from foodscan.services.normalizer import normalize

SCORE_VERSION = "2.0"
BASE_SCORE = 100.0


@dataclass(frozen=True)
class PenaltyCurve:
    """Tiered piecewise-linear penalty on the excess above a threshold.

    ``tiers`` holds ``(width, rate)`` pairs applied in order; the last tier
    should have an infinite width.
    """

    kind: str
    field_name: str
    threshold: float
    tiers: tuple[tuple[float, float], ...]
    cap: float
    message: str
    diabetic_multiplier: float = 1.0

    def penalty(self, value: float, *, is_diabetic: bool = False) -> float:
        excess = value - self.threshold
        total = 0.0
        for width, rate in self.tiers:
            if excess <= 0:
                break
            step = min(excess, width)
            total += step * rate
            excess -= step
        if is_diabetic:
            total *= self.diabetic_multiplier
        return min(self.cap, total)


@dataclass(frozen=True)
class BandedReward:
    """Bonus picked from the first ``(minimum, bonus)`` band the value meets."""

    kind: str
    field_name: str
    bands: tuple[tuple[float, int], ...]
    message: str

    def bonus(self, value: float) -> int:
        for minimum, bonus in self.bands:
            if value >= minimum:
                return bonus
        return 0


PENALTY_CURVES: tuple[PenaltyCurve, ...] = (
    PenaltyCurve(
        kind="calories",
        field_name="calories",
        threshold=200,
        tiers=((100, 0.05), (100, 0.08), (math.inf, 0.06)),
        cap=25,
        message="High calorie density: {value:g} kcal/100g",
    ),
    PenaltyCurve(
        kind="sugar",
        field_name="sugar",
        threshold=5,
        tiers=((5, 1.5), (10, 1.0), (math.inf, 0.8)),
        cap=30,
        message="Sugar content: {value:.1f}g/100g",
        diabetic_multiplier=1.5,
    ),
    PenaltyCurve(
        kind="fat",
        field_name="fat",
        threshold=10,
        tiers=((10, 0.5), (10, 0.6), (math.inf, 0.45)),
        cap=20,
        message="Fat content: {value:.1f}g/100g",
    ),
    PenaltyCurve(
        kind="salt",
        field_name="salt",
        threshold=0.3,
        tiers=((0.5, 8), (1.0, 6), (math.inf, 3.3)),
        cap=15,
        message="Salt content: {value:.2f}g/100g",
    ),
)

BANDED_REWARDS: tuple[BandedReward, ...] = (
    BandedReward(
        kind="protein",
        field_name="protein",
        bands=((20, 10), (15, 8), (10, 5), (8, 3)),
        message="Good protein: {value:.1f}g/100g",
    ),
    BandedReward(
        kind="fiber",
        field_name="fiber",
        bands=((15, 10), (10, 8), (7, 5), (5, 3)),
        message="High fiber: {value:.1f}g/100g",
    ),
)

GRADE_BANDS: tuple[GradeBand, ...] = (
    GradeBand(Grade.A_PLUS, 90, "Excellent", "🌟", "#10b981"),
    GradeBand(Grade.A, 80, "Very Good", "✅", "#22c55e"),
    GradeBand(Grade.B, 70, "Good", "👍", "#84cc16"),
    GradeBand(Grade.C, 60, "Fair", "⚠️", "#f59e0b"),
    GradeBand(Grade.D, 50, "Poor", "⚠️", "#f97316"),
    GradeBand(Grade.F, 0, "Very Poor", "❌", "#ef4444"),
)

COMBINATION_PENALTY = 5
LOW_CALORIE_BONUS = 5
OPTIMAL_PROFILE_BONUS = 5


@dataclass(frozen=True)
class ScoreEngine:
    """Computes the 0-100 health score for a nutrition record."""

    penalty_curves: tuple[PenaltyCurve, ...] = PENALTY_CURVES
    banded_rewards: tuple[BandedReward, ...] = BANDED_REWARDS
    grade_bands: tuple[GradeBand, ...] = GRADE_BANDS

    def score(self, nutrition: NutritionRecord, options: ScoreOptions) -> ScoreResult:
        """Score a normalized record."""
        n = nutrition
        penalties: list[PenaltyEntry] = []
        rewards: list[RewardEntry] = []

        for curve in self.penalty_curves:
            value = getattr(n, curve.field_name)
            if value <= curve.threshold:
                continue
            magnitude = curve.penalty(value, is_diabetic=options.is_diabetic)
            penalties.append(
                PenaltyEntry(
                    kind=curve.kind,
                    triggering_value=value,
                    magnitude=magnitude,
                    message=curve.message.format(value=value),
                )
            )

        if n.sugar > 10 and n.fat > 20:
            penalties.append(
                PenaltyEntry(
                    kind="combination",
                    triggering_value=n.sugar,
                    magnitude=COMBINATION_PENALTY,
                    message="High sugar & fat combination",
                )
            )
        if n.calories > 400 and n.sugar > 15:
            penalties.append(
                PenaltyEntry(
                    kind="metabolic",
                    triggering_value=n.calories,
                    magnitude=COMBINATION_PENALTY,
                    message="High metabolic impact",
                )
            )

        for reward in self.banded_rewards:
            value = getattr(n, reward.field_name)
            bonus = reward.bonus(value)
            if bonus:
                rewards.append(
                    RewardEntry(
                        kind=reward.kind,
                        triggering_value=value,
                        magnitude=bonus,
                        message=reward.message.format(value=value),
                    )
                )

        if n.calories < 100 and n.protein >= 5:
            rewards.append(
                RewardEntry(
                    kind="lowcal",
                    triggering_value=n.calories,
                    magnitude=LOW_CALORIE_BONUS,
                    message="Low calorie, good protein balance",
                )
            )
        if _is_optimal_profile(n):
            rewards.append(
                RewardEntry(
                    kind="optimal",
                    triggering_value=n.protein,
                    magnitude=OPTIMAL_PROFILE_BONUS,
                    message="Optimal nutrient balance!",
                )
            )

        total_penalties = sum(entry.magnitude for entry in penalties)
        total_rewards = sum(entry.magnitude for entry in rewards)
        raw_score = BASE_SCORE - total_penalties + total_rewards
        score = max(0, min(100, round_half_up(raw_score)))
        band = self.grade_for(score)

        return ScoreResult(
            score=score,
            grade=band.grade,
            label=band.label,
            emoji=band.emoji,
            color=band.color,
            recommendation=_recommendation(score, penalties, options.is_diabetic),
            penalties=tuple(penalties),
            rewards=tuple(rewards),
            diabetic_warning=diabetic_warning_line(n, options.is_diabetic),
            nutrition_profile=NutritionProfile(
                calories=n.calories,
                sugar=n.sugar,
                fat=n.fat,
                salt=n.salt,
                protein=n.protein,
                fiber=n.fiber,
            ),
            total_penalties=total_penalties,
            total_rewards=total_rewards,
            version=SCORE_VERSION,
            unreported_nutrients=n.unreported_among(
                ("calories", "sugar", "fat", "salt", "protein", "fiber")
            ),
        )

    def grade_for(self, score: int) -> GradeBand:
        """Return the grade band for a clamped score."""
        for band in self.grade_bands:
            if score >= band.min_score:
                return band
        return self.grade_bands[-1]


def diabetic_warning_line(nutrition: NutritionRecord, is_diabetic: bool) -> str | None:
    """One-line warning for diabetics, driven by sugar alone."""
    if not is_diabetic:
        return None
    sugar = nutrition.sugar
    if sugar > 15:
        return (
            "🚫 CRITICAL: Very high sugar content. "
            "May cause severe blood glucose spike. Avoid completely."
        )
    if sugar > 10:
        return (
            "⚠️ WARNING: High sugar content. "
            "Will significantly raise blood glucose levels. Not recommended."
        )
    if sugar > 5:
        return (
            "⚡ CAUTION: Moderate sugar content. "
            "Monitor blood glucose if consumed. Limit portion size."
        )
    if sugar < 3 and nutrition.calories < 200:
        return "✅ SAFE: Diabetic-friendly option. Low sugar and moderate calories."
    return None


def _is_optimal_profile(n: NutritionRecord) -> bool:
    return (
        n.sugar < 5
        and n.fat < 10
        and n.salt < 0.5
        and n.protein >= 10
        and n.fiber >= 5
    )


def _recommendation(
    score: int, penalties: list[PenaltyEntry], is_diabetic: bool
) -> str:
    largest = sorted(penalties, key=lambda entry: entry.magnitude, reverse=True)
    main_issues = " and ".join(entry.kind for entry in largest[:2])
    if score >= 85:
        return (
            "Excellent choice! This food has an outstanding nutritional profile. "
            "Perfect for a healthy diet."
        )
    if score >= 70:
        text = (
            "Good choice! A nutritious option that fits well in a balanced diet. "
            "Enjoy in moderation."
        )
        if main_issues:
            text += f" Keep an eye on {main_issues} content."
        return text
    if score >= 55:
        return (
            f"Fair choice. Watch out for {main_issues} content. "
            "Consider healthier alternatives when possible."
        )
    critical = ", ".join(entry.kind for entry in penalties if entry.magnitude > 10)
    text = "⚠️ Not recommended for regular consumption. "
    if critical:
        text += f"High in {critical}. "
    if is_diabetic:
        return text + "Not suitable for diabetic diet."
    return text + "Choose healthier alternatives."


DEFAULT_SCORE_ENGINE = ScoreEngine()


def compute_health_score(
    nutrition: Mapping[str, object] | NutritionRecord | None,
    options: ScoreOptions | None = None,
) -> ScoreResult:
    """Normalize the input and compute its health score."""
    return DEFAULT_SCORE_ENGINE.score(normalize(nutrition), options or ScoreOptions())
