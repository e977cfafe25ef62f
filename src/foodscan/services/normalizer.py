"""Coerce raw nutrition input into a canonical record."""

import math
from collections.abc import Mapping
from dataclasses import replace

from foodscan.domain.nutrition import NutritionRecord

SALT_PER_SODIUM = 2.5

# Canonical field name -> accepted raw keys, first match wins.
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "calories": ("calories", "energy_kcal", "energy-kcal"),
    "sugar": ("sugar", "sugars"),
    "fat": ("fat",),
    "saturated_fat": ("saturated_fat", "saturatedFat", "saturated-fat"),
    "salt": ("salt",),
    "sodium": ("sodium",),
    "protein": ("protein", "proteins"),
    "fiber": ("fiber", "fibre"),
    "carbs": ("carbs", "carbohydrates"),
    "caffeine": ("caffeine",),
    "vitamin_a": ("vitamin_a", "vitaminA", "vitamin-a"),
    "calcium": ("calcium",),
    "iron": ("iron",),
    "folate": ("folate", "folic_acid"),
}


def normalize(raw: Mapping[str, object] | NutritionRecord | None) -> NutritionRecord:
    """Return a complete non-negative record; never raises.

    Missing or unusable values become 0 and are listed in ``unreported``.
    Negative values are clamped to 0 but still count as reported.
    """
    if isinstance(raw, NutritionRecord):
        return _reclamp(raw)
    source: Mapping[str, object] = raw if isinstance(raw, Mapping) else {}

    values: dict[str, float] = {}
    unreported: list[str] = []
    for field_name, keys in _FIELD_KEYS.items():
        value = coerce_number(_first_present(source, keys))
        if value is None:
            values[field_name] = 0.0
            unreported.append(field_name)
        else:
            values[field_name] = max(0.0, value)

    if "salt" in unreported and "sodium" not in unreported:
        values["salt"] = values["sodium"] * SALT_PER_SODIUM
        unreported.remove("salt")

    return NutritionRecord(**values, unreported=tuple(unreported))


def _reclamp(record: NutritionRecord) -> NutritionRecord:
    """Enforce the non-negative invariant on a record built by hand."""
    values: dict[str, float] = {}
    unreported = list(record.unreported)
    for field_name in _FIELD_KEYS:
        value = coerce_number(getattr(record, field_name))
        if value is None:
            values[field_name] = 0.0
            if field_name not in unreported:
                unreported.append(field_name)
        else:
            values[field_name] = max(0.0, value)
    cleaned = replace(record, **values, unreported=tuple(unreported))
    return record if cleaned == record else cleaned


def _first_present(source: Mapping[str, object], keys: tuple[str, ...]) -> object:
    for key in keys:
        if key in source and source[key] is not None:
            return source[key]
    return None


def coerce_number(value: object) -> float | None:
    """Parse a number from loose input; None when it is missing or unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
