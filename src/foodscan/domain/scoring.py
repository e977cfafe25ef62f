"""Health score domain models."""

from dataclasses import dataclass
from enum import Enum


class Grade(str, Enum):
    """Letter grade derived from the clamped score."""

    A_PLUS = "A+"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @property
    def rank(self) -> int:
        """Ordinal rank, higher is better."""
        return _GRADE_RANKS[self]


_GRADE_RANKS = {
    Grade.F: 0,
    Grade.D: 1,
    Grade.C: 2,
    Grade.B: 3,
    Grade.A: 4,
    Grade.A_PLUS: 5,
}


@dataclass(frozen=True)
class GradeBand:
    """A grade with its inclusive lower score bound and display hints."""

    grade: Grade
    min_score: int
    label: str
    emoji: str
    color: str


@dataclass(frozen=True)
class PenaltyEntry:
    """Points subtracted from the score by one rule."""

    kind: str
    triggering_value: float
    magnitude: float
    message: str


@dataclass(frozen=True)
class RewardEntry:
    """Points added to the score by one rule."""

    kind: str
    triggering_value: float
    magnitude: float
    message: str


@dataclass(frozen=True)
class NutritionProfile:
    """The nutrient values the score was computed from."""

    calories: float
    sugar: float
    fat: float
    salt: float
    protein: float
    fiber: float


@dataclass(frozen=True)
class ScoreResult:
    """General health score for a product."""

    score: int
    grade: Grade
    label: str
    emoji: str
    color: str
    recommendation: str
    penalties: tuple[PenaltyEntry, ...]
    rewards: tuple[RewardEntry, ...]
    diabetic_warning: str | None
    nutrition_profile: NutritionProfile
    total_penalties: float
    total_rewards: float
    version: str
    unreported_nutrients: tuple[str, ...] = ()
