"""Nutrition domain models."""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

_logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class Gender(str, Enum):
    """Reference intake gender."""

    MALE = "male"
    FEMALE = "female"


class DiabeticType(str, Enum):
    """Diabetes type used for type-specific warnings."""

    TYPE1 = "type1"
    TYPE2 = "type2"


class ActivityLevel(str, Enum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    MODERATE = "moderate"
    ACTIVE = "active"


class Profile(str, Enum):
    """Daily value reference profile."""

    STANDARD = "standard"
    PREGNANT = "pregnant"
    ATHLETE = "athlete"


class TargetGroup(str, Enum):
    """Vulnerable population a safety evaluation is scoped to."""

    PREGNANT = "pregnant"
    CHILD = "child"


@dataclass(frozen=True)
class NutritionRecord:
    """Canonical per-100g nutrition facts.

    Masses are grams per 100g, except ``calories`` (kcal) and ``caffeine`` (mg).
    ``unreported`` lists fields that were missing or unusable in the raw input
    and were therefore set to zero.
    """

    calories: float = 0.0
    sugar: float = 0.0
    fat: float = 0.0
    saturated_fat: float = 0.0
    salt: float = 0.0
    sodium: float = 0.0
    protein: float = 0.0
    fiber: float = 0.0
    carbs: float = 0.0
    caffeine: float = 0.0
    vitamin_a: float = 0.0
    calcium: float = 0.0
    iron: float = 0.0
    folate: float = 0.0
    unreported: tuple[str, ...] = ()

    def is_reported(self, field_name: str) -> bool:
        """Return whether a field carried a usable value in the raw input."""
        return field_name not in self.unreported

    def unreported_among(self, field_names: Iterable[str]) -> tuple[str, ...]:
        """Return the subset of ``field_names`` that was not reported."""
        return tuple(name for name in field_names if name in self.unreported)


@dataclass(frozen=True)
class ScoreOptions:
    """User options shared by the scoring engines."""

    gender: Gender = Gender.MALE
    is_diabetic: bool = False
    diabetic_type: DiabeticType = DiabeticType.TYPE2
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    profile: Profile = Profile.STANDARD

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object] | None) -> "ScoreOptions":
        """Build options from a loose mapping, falling back to defaults."""
        if not raw:
            return cls()
        return cls(
            gender=_parse_enum(Gender, _lookup(raw, "gender"), Gender.MALE),
            is_diabetic=_parse_flag(_lookup(raw, "is_diabetic", "isDiabetic")),
            diabetic_type=_parse_enum(
                DiabeticType,
                _lookup(raw, "diabetic_type", "diabeticType"),
                DiabeticType.TYPE2,
            ),
            activity_level=_parse_enum(
                ActivityLevel,
                _lookup(raw, "activity_level", "activityLevel"),
                ActivityLevel.MODERATE,
            ),
            profile=_parse_enum(Profile, _lookup(raw, "profile"), Profile.STANDARD),
        )


def parse_target_group(value: object) -> TargetGroup | None:
    """Resolve a target group, returning None when unrecognised."""
    if isinstance(value, TargetGroup):
        return value
    if isinstance(value, str):
        try:
            return TargetGroup(value.strip().lower())
        except ValueError:
            return None
    return None


def detect_gender(gender: str | None, calorie_goal: float | None) -> Gender:
    """Pick a gender from an explicit setting or a daily calorie goal."""
    if gender:
        return _parse_enum(Gender, gender, Gender.MALE)
    if calorie_goal is not None and calorie_goal <= 2000:  # noqa: PLR2004
        return Gender.FEMALE
    return Gender.MALE


def detect_profile(
    profile: str | None, dietary_preferences: Iterable[str] | None
) -> Profile:
    """Pick a profile from an explicit setting or dietary preferences."""
    if profile:
        return _parse_enum(Profile, profile, Profile.STANDARD)
    preferences = {item.strip().lower() for item in dietary_preferences or ()}
    if "pregnant" in preferences:
        return Profile.PREGNANT
    if preferences & {"athlete", "high-protein"}:
        return Profile.ATHLETE
    return Profile.STANDARD


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)


def _lookup(raw: Mapping[str, object], *keys: str) -> object | None:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _parse_enum(enum_cls: type[E], value: object, default: E) -> E:
    if value is None or value == "":
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        _logger.warning(
            "Unknown %s value %r, using %s", enum_cls.__name__, value, default.value
        )
        return default


def _parse_flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
