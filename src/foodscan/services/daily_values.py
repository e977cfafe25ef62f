"""Daily value percentage engine."""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from foodscan.domain.daily_values import (
    DailyValueCategory,
    DailyValueEntry,
    DailyValueReport,
    DailyValueSummary,
    Polarity,
    ReferenceIntake,
    ReferenceIntakeTable,
)
from foodscan.domain.nutrition import (
    Gender,
    NutritionRecord,
    ScoreOptions,
    round_half_up,
)
from foodscan.services.normalizer import normalize

DV_NUTRIENTS: tuple[str, ...] = ("calories", "sugar", "fat", "salt", "protein", "fiber")
BENEFICIAL_NUTRIENTS = frozenset({"protein", "fiber"})
HIGH_PERCENTAGE = 30
LOW_BENEFICIAL_PERCENTAGE = 10

# Sources: FDA, WHO and EFSA reference intakes.
REFERENCE_INTAKES = ReferenceIntakeTable(
    standard=MappingProxyType(
        {
            Gender.MALE: ReferenceIntake(
                calories=2500,
                sugar=36,
                fat=78,
                saturated_fat=24,
                salt=6,
                sodium=2400,
                protein=56,
                fiber=38,
                carbs=340,
                cholesterol=300,
            ),
            Gender.FEMALE: ReferenceIntake(
                calories=2000,
                sugar=25,
                fat=70,
                saturated_fat=20,
                salt=6,
                sodium=2400,
                protein=46,
                fiber=25,
                carbs=275,
                cholesterol=300,
            ),
        }
    ),
    pregnant=ReferenceIntake(
        calories=2200,
        sugar=25,
        fat=73,
        saturated_fat=22,
        salt=6,
        sodium=2400,
        protein=71,
        fiber=28,
        carbs=302,
        cholesterol=300,
    ),
    athlete=MappingProxyType(
        {
            Gender.MALE: ReferenceIntake(
                calories=3500,
                sugar=50,
                fat=117,
                saturated_fat=35,
                salt=8,
                sodium=3200,
                protein=140,
                fiber=45,
                carbs=480,
                cholesterol=300,
            ),
            Gender.FEMALE: ReferenceIntake(
                calories=2800,
                sugar=40,
                fat=93,
                saturated_fat=28,
                salt=7,
                sodium=2800,
                protein=112,
                fiber=35,
                carbs=385,
                cholesterol=300,
            ),
        }
    ),
)


@dataclass(frozen=True)
class _CategoryBand:
    minimum: int
    category: DailyValueCategory
    color: str
    icon: str
    description: str


_BENEFICIAL_BANDS = (
    _CategoryBand(
        40, DailyValueCategory.EXCELLENT, "#10b981", "⭐", "Outstanding source"
    ),
    _CategoryBand(20, DailyValueCategory.HIGH, "#22c55e", "✅", "Good source"),
    _CategoryBand(10, DailyValueCategory.MODERATE, "#84cc16", "👍", "Contains some"),
    _CategoryBand(0, DailyValueCategory.LOW, "#f59e0b", "⚡", "Low source"),
)

_LIMIT_BANDS = (
    _CategoryBand(
        50, DailyValueCategory.VERY_HIGH, "#ef4444", "🚫", "Excessive amount"
    ),
    _CategoryBand(30, DailyValueCategory.HIGH, "#f97316", "⚠️", "High amount"),
    _CategoryBand(15, DailyValueCategory.MODERATE, "#f59e0b", "⚡", "Moderate amount"),
    _CategoryBand(5, DailyValueCategory.LOW, "#84cc16", "👍", "Low amount"),
    _CategoryBand(0, DailyValueCategory.VERY_LOW, "#10b981", "✅", "Minimal amount"),
)


def polarity_of(nutrient: str) -> Polarity:
    """Return whether more of ``nutrient`` is good or bad."""
    if nutrient in BENEFICIAL_NUTRIENTS:
        return Polarity.BENEFICIAL
    return Polarity.LIMIT


@dataclass(frozen=True)
class DailyValueEngine:
    """Maps nutrient amounts to daily value percentages and categories."""

    intakes: ReferenceIntakeTable = REFERENCE_INTAKES
    nutrients: tuple[str, ...] = DV_NUTRIENTS

    def entry(
        self, nutrient: str, value: float, reference: ReferenceIntake
    ) -> DailyValueEntry:
        """Compute the daily value entry for one nutrient."""
        target = reference.target_for(nutrient)
        percentage = round_half_up(value / target * 100)
        polarity = polarity_of(nutrient)
        band = _categorize(percentage, polarity)
        return DailyValueEntry(
            nutrient=nutrient,
            value=value,
            percentage=percentage,
            target=target,
            category=band.category,
            polarity=polarity,
            description=band.description,
            color=band.color,
            icon=band.icon,
            recommendation=_recommendation(percentage, nutrient, polarity),
            display_text=display_text(percentage, nutrient),
        )

    def report(
        self, nutrition: NutritionRecord, options: ScoreOptions
    ) -> DailyValueReport:
        """Compute entries for every tracked nutrient plus a summary."""
        reference = self.intakes.resolve(options.profile, options.gender)
        entries = {
            nutrient: self.entry(nutrient, getattr(nutrition, nutrient), reference)
            for nutrient in self.nutrients
        }
        average = round_half_up(
            sum(entry.percentage for entry in entries.values()) / len(entries)
        )
        above = tuple(
            name
            for name, entry in entries.items()
            if entry.percentage >= HIGH_PERCENTAGE
        )
        below = tuple(
            name
            for name, entry in entries.items()
            if entry.polarity is Polarity.BENEFICIAL
            and entry.percentage < LOW_BENEFICIAL_PERCENTAGE
        )
        return DailyValueReport(
            entries=entries,
            summary=DailyValueSummary(
                average_percentage=average,
                nutrients_above_threshold=above,
                beneficial_nutrients_below_threshold=below,
                profile=options.profile,
                gender=options.gender,
                gender_symbol="♂" if options.gender is Gender.MALE else "♀",
            ),
        )


def display_text(percentage: int, nutrient: str) -> str:
    """Short human label for a daily value percentage."""
    beneficial = polarity_of(nutrient) is Polarity.BENEFICIAL
    if percentage >= 100:
        return "Exceeds daily needs" if beneficial else "More than daily limit"
    if percentage >= 50:
        return "Half of daily needs" if beneficial else "Half of daily limit"
    if percentage >= 25:
        return "Quarter of daily needs" if beneficial else "Quarter of daily limit"
    if percentage >= 10:
        return f"{percentage}% of daily value"
    return "Minimal contribution"


def _categorize(percentage: int, polarity: Polarity) -> _CategoryBand:
    bands = _BENEFICIAL_BANDS if polarity is Polarity.BENEFICIAL else _LIMIT_BANDS
    for band in bands:
        if percentage >= band.minimum:
            return band
    return bands[-1]


def _recommendation(percentage: int, nutrient: str, polarity: Polarity) -> str:
    if polarity is Polarity.BENEFICIAL:
        if percentage >= 40:
            return f"Excellent {nutrient} content! Great for daily intake."
        if percentage >= 20:
            return f"Good source of {nutrient}. Contributes well to daily needs."
        if percentage >= 10:
            return (
                f"Provides some {nutrient}. Consider supplementing from other sources."
            )
        return f"Low in {nutrient}. Look for additional sources throughout the day."
    if percentage >= 50:
        return f"Very high in {nutrient}. Consume sparingly or avoid."
    if percentage >= 30:
        return f"High in {nutrient}. Limit consumption and balance with other foods."
    if percentage >= 15:
        return f"Moderate {nutrient} content. Monitor total daily intake."
    return f"Low in {nutrient}. Good for frequent consumption."


DEFAULT_DAILY_VALUE_ENGINE = DailyValueEngine()


def compute_daily_values(
    nutrition: Mapping[str, object] | NutritionRecord | None,
    options: ScoreOptions | None = None,
) -> DailyValueReport:
    """Normalize the input and compute its daily value report."""
    return DEFAULT_DAILY_VALUE_ENGINE.report(
        normalize(nutrition), options or ScoreOptions()
    )
