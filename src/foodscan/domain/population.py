"""Population safety domain models."""

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from foodscan.domain.nutrition import NutritionRecord, TargetGroup


class Suitability(str, Enum):
    """Terminal classification of a population evaluation."""

    GOOD = "good"
    MODERATE = "moderate"
    AVOID = "avoid"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class SuitabilityStyle:
    """Display hints for a suitability bucket."""

    label: str
    emoji: str
    color: str
    description: str


@dataclass(frozen=True)
class ProductMeta:
    """Product attributes scanned by the population rules."""

    name: str = ""
    ingredients_text: str = ""
    allergens: tuple[str, ...] = ()
    nova_group: int | None = None

    @classmethod
    def from_mapping(cls, raw: object) -> "ProductMeta":
        """Build product metadata from a loose mapping; anything else is empty."""
        if not isinstance(raw, Mapping) or not raw:
            return cls()
        ingredients = (
            raw.get("ingredients_text")
            or raw.get("ingredientsText")
            or raw.get("ingredients")
            or ""
        )
        allergens = raw.get("allergens") or ()
        if isinstance(allergens, str):
            allergens = tuple(part.strip() for part in allergens.split(","))
        elif not isinstance(allergens, (list, tuple)):
            allergens = ()
        nova = raw.get("nova_group", raw.get("novaGroup", raw.get("nova")))
        return cls(
            name=str(raw.get("name") or ""),
            ingredients_text=str(ingredients),
            allergens=tuple(str(item) for item in allergens if item),
            nova_group=_as_nova_group(nova),
        )


def _as_nova_group(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if math.isfinite(value) else None


@dataclass(frozen=True)
class NutrientLimit:
    """Three-tier per-100g limit for one nutrient."""

    field_name: str
    label: str
    safe: float
    moderate: float
    avoid: float
    reason: str
    report_positive: bool = False


@dataclass(frozen=True)
class NutrientRule:
    """Warning triggered by the nutrition record."""

    predicate: Callable[[NutritionRecord], bool]
    message: str
    increment: int = 15
    kind: Literal["nutrient"] = "nutrient"


@dataclass(frozen=True)
class IngredientRule:
    """Warning triggered by ingredient substrings.

    When ``list_matches`` is set the message is prefixed with the matched terms.
    """

    terms: tuple[str, ...]
    message: str
    increment: int = 15
    list_matches: bool = False
    kind: Literal["ingredient"] = "ingredient"


@dataclass(frozen=True)
class AllergenRule:
    """Warning triggered by declared allergens."""

    allergens: tuple[str, ...]
    message: str
    increment: int = 15
    kind: Literal["allergen"] = "allergen"


@dataclass(frozen=True)
class ProductMetaRule:
    """Warning triggered by product metadata such as name or NOVA group."""

    predicate: Callable[[ProductMeta], bool]
    message: str
    increment: int = 15
    kind: Literal["product_meta"] = "product_meta"


WarningRule = NutrientRule | IngredientRule | AllergenRule | ProductMetaRule


@dataclass(frozen=True)
class PopulationRules:
    """Immutable guideline set for one target group."""

    target_group: TargetGroup
    group_name: str
    audience: str
    display_name: str
    disclaimer: str
    denylist: tuple[str, ...]
    limits: tuple[NutrientLimit, ...]
    essential_nutrients: Mapping[str, float]
    warning_rules: tuple[WarningRule, ...]
    caffeine_limit_mg: float | None = None
    caffeine_increment: int = 50


@dataclass(frozen=True)
class PopulationEvaluation:
    """Suitability of a product for a vulnerable population."""

    target_group: str
    suitability: Suitability
    severity_score: int | None
    warnings: tuple[str, ...]
    positives: tuple[str, ...]
    explanation: str
    label: str
    emoji: str
    color: str
    display_name: str
    disclaimer: str
    unreported_nutrients: tuple[str, ...] = ()
