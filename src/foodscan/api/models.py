"""Pydantic models for API request payloads."""

from typing import Any

from pydantic import BaseModel, Field

from foodscan.domain.nutrition import (
    ScoreOptions,
    detect_gender,
    detect_profile,
)
from foodscan.domain.population import ProductMeta


class PreferencesIn(BaseModel):
    """User preferences; gender and profile are inferred when omitted."""

    gender: str | None = None
    calorie_goal: float | None = None
    is_diabetic: bool = False
    diabetic_type: str | None = None
    activity_level: str | None = None
    profile: str | None = None
    dietary_preferences: list[str] = Field(default_factory=list)

    def to_options(self) -> ScoreOptions:
        """Resolve preferences into engine options."""
        base = ScoreOptions.from_mapping(
            {
                "is_diabetic": self.is_diabetic,
                "diabetic_type": self.diabetic_type,
                "activity_level": self.activity_level,
            }
        )
        return ScoreOptions(
            gender=detect_gender(self.gender, self.calorie_goal),
            is_diabetic=base.is_diabetic,
            diabetic_type=base.diabetic_type,
            activity_level=base.activity_level,
            profile=detect_profile(self.profile, self.dietary_preferences),
        )


class ProductIn(BaseModel):
    """Product attributes used by the population rules."""

    name: str = ""
    ingredients_text: str = ""
    allergens: list[str] = Field(default_factory=list)
    nova_group: int | None = None

    def to_meta(self) -> ProductMeta:
        return ProductMeta(
            name=self.name,
            ingredients_text=self.ingredients_text,
            allergens=tuple(self.allergens),
            nova_group=self.nova_group,
        )


class AnalyzeRequest(BaseModel):
    """Body of ``POST /analyze``."""

    nutrition: dict[str, Any] | None = None
    preferences: PreferencesIn = Field(default_factory=PreferencesIn)
    product: ProductIn = Field(default_factory=ProductIn)
    target_groups: list[str] | None = None


class PopulationRequest(BaseModel):
    """Body of ``POST /population/{target_group}``."""

    nutrition: dict[str, Any] | None = None
    product: ProductIn = Field(default_factory=ProductIn)
