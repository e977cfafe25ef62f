"""Product domain models."""

from dataclasses import dataclass
from datetime import datetime

from foodscan.domain.daily_values import DailyValueReport
from foodscan.domain.diabetic import DiabeticRisk, DiabeticWarning, GlucoseImpact
from foodscan.domain.nutrition import NutritionRecord, ScoreOptions
from foodscan.domain.population import PopulationEvaluation, ProductMeta
from foodscan.domain.scoring import ScoreResult


@dataclass(frozen=True)
class ProductSummary:
    """Search result entry from the product database."""

    barcode: str | None
    name: str
    brand: str
    image_url: str | None
    nutriscore: str | None
    nova_group: int | None


@dataclass(frozen=True)
class ProductRecord:
    """Product fetched from the product database."""

    barcode: str
    name: str
    brand: str
    image_url: str
    nutrition: NutritionRecord
    ingredients_text: str
    allergens: tuple[str, ...]
    categories: str
    nutriscore: str | None
    nova_group: int | None
    ecoscore: str | None
    last_modified: datetime | None
    completeness: int

    def meta(self) -> ProductMeta:
        """Return the attributes scanned by population rules."""
        return ProductMeta(
            name=self.name,
            ingredients_text=self.ingredients_text,
            allergens=self.allergens,
            nova_group=self.nova_group,
        )


@dataclass(frozen=True)
class DataQuality:
    """Plausibility assessment of a nutrition record."""

    quality: str
    issues: tuple[str, ...]


@dataclass(frozen=True)
class NutritionReport:
    """Combined output of every engine for one nutrition record."""

    options: ScoreOptions
    nutrition: NutritionRecord
    health_score: ScoreResult
    daily_values: DailyValueReport
    diabetic_warnings: tuple[DiabeticWarning, ...]
    diabetic_risk: DiabeticRisk
    glucose_impact: GlucoseImpact
    population: dict[str, PopulationEvaluation]
    data_quality: DataQuality


@dataclass(frozen=True)
class EnrichedProduct:
    """Product record with its nutrition report attached."""

    product: ProductRecord
    report: NutritionReport


@dataclass(frozen=True)
class Alternative:
    """A product scoring higher than the one being viewed."""

    name: str
    brand: str
    score: int
    nutriscore: str | None
    image_url: str | None
    improvement: int
