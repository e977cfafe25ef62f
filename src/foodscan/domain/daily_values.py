"""Daily value domain models."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from foodscan.domain.nutrition import Gender, Profile


class Polarity(str, Enum):
    """Whether more of a nutrient is good or bad."""

    BENEFICIAL = "beneficial"
    LIMIT = "limit"


class DailyValueCategory(str, Enum):
    """Qualitative bucket for a daily value percentage."""

    EXCELLENT = "Excellent"
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"
    VERY_LOW = "Very Low"
    VERY_HIGH = "Very High"


@dataclass(frozen=True)
class ReferenceIntake:
    """Daily reference intake targets for one profile."""

    calories: float
    sugar: float
    fat: float
    saturated_fat: float
    salt: float
    sodium: float
    protein: float
    fiber: float
    carbs: float
    cholesterol: float

    def target_for(self, nutrient: str, default: float = 100.0) -> float:
        """Return the target for a nutrient, or ``default`` if unknown."""
        value = getattr(self, nutrient, None)
        if not isinstance(value, (int, float)) or value <= 0:
            return default
        return float(value)


@dataclass(frozen=True)
class ReferenceIntakeTable:
    """Reference intakes keyed by gender, plus pregnancy and athlete variants."""

    standard: Mapping[Gender, ReferenceIntake]
    pregnant: ReferenceIntake
    athlete: Mapping[Gender, ReferenceIntake]

    def resolve(self, profile: Profile, gender: Gender) -> ReferenceIntake:
        """Pick the intake for a profile; athlete beats pregnant beats standard."""
        if profile is Profile.ATHLETE:
            return self.athlete.get(gender) or self.athlete[Gender.MALE]
        if profile is Profile.PREGNANT:
            return self.pregnant
        return self.standard.get(gender) or self.standard[Gender.MALE]


@dataclass(frozen=True)
class DailyValueEntry:
    """Daily value percentage and category for one nutrient."""

    nutrient: str
    value: float
    percentage: int
    target: float
    category: DailyValueCategory
    polarity: Polarity
    description: str
    color: str
    icon: str
    recommendation: str
    display_text: str


@dataclass(frozen=True)
class DailyValueSummary:
    """Aggregate view across all daily value entries."""

    average_percentage: int
    nutrients_above_threshold: tuple[str, ...]
    beneficial_nutrients_below_threshold: tuple[str, ...]
    profile: Profile
    gender: Gender
    gender_symbol: str


@dataclass(frozen=True)
class DailyValueReport:
    """Daily value entries keyed by nutrient name with a summary."""

    entries: dict[str, DailyValueEntry]
    summary: DailyValueSummary
