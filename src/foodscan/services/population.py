"""Safety evaluation for pregnant women and children under 6."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from foodscan.domain.nutrition import NutritionRecord, TargetGroup, parse_target_group
from foodscan.domain.population import (
    AllergenRule,
    IngredientRule,
    NutrientLimit,
    NutrientRule,
    PopulationEvaluation,
    PopulationRules,
    ProductMeta,
    ProductMetaRule,
    Suitability,
    SuitabilityStyle,
    WarningRule,
)
from foodscan.services.guidelines import DEFAULT_RULES, DISCLAIMER, estimate_caffeine_mg
from foodscan.services.normalizer import normalize

_logger = logging.getLogger(__name__)

AVOID_SEVERITY = 80
MODERATE_SEVERITY = 40
SHORT_CIRCUIT_SEVERITY = 100
MODERATE_TIER_SEVERITY = 20
HIGH_TIER_SEVERITY = 40
GOOD_FIBER_GRAMS = 3

SUITABILITY_STYLES: Mapping[Suitability, SuitabilityStyle] = {
    Suitability.GOOD: SuitabilityStyle(
        "Good Choice", "✅", "#10b981", "Safe and nutritious for this population"
    ),
    Suitability.MODERATE: SuitabilityStyle(
        "Moderate", "⚠️", "#f59e0b", "Acceptable occasionally, but monitor intake"
    ),
    Suitability.AVOID: SuitabilityStyle(
        "Avoid", "🚫", "#ef4444", "Not recommended for this population"
    ),
    Suitability.INSUFFICIENT_DATA: SuitabilityStyle(
        "Insufficient Data",
        "❓",
        "#9ca3af",
        "Not enough information to evaluate safety",
    ),
}

# Nutrient -> (minimum when the guideline set omits it, positive message).
_ESSENTIAL_CHECKS: tuple[tuple[str, float | None, str], ...] = (
    ("protein", None, "Good protein source ({value:.1f}g)"),
    ("fiber", 3.0, "High fiber ({value:.1f}g)"),
    ("iron", 0.001, "Contains iron - important for development"),
    ("calcium", 0.1, "Good calcium source - supports bone health"),
    ("folate", None, "Contains folate - supports neural development"),
)


@dataclass(frozen=True)
class PopulationSafetyEngine:
    """Evaluates product suitability against per-group guideline sets."""

    rules: Mapping[TargetGroup, PopulationRules] = field(
        default_factory=lambda: DEFAULT_RULES
    )

    def evaluate(
        self,
        nutrition: NutritionRecord | Mapping[str, object] | None,
        target_group: TargetGroup | str,
        product_meta: ProductMeta | Mapping[str, object] | None = None,
    ) -> PopulationEvaluation:
        """Classify a product as good, moderate, avoid or insufficient data."""
        group = parse_target_group(target_group)
        label = _group_label(target_group)
        if not isinstance(nutrition, (NutritionRecord, Mapping)):
            _logger.warning("No usable nutrition data for %s evaluation", label)
            return _insufficient_data(label)
        if group is None or group not in self.rules:
            _logger.warning("Unknown target group: %s", label)
            return _insufficient_data(label)

        rules = self.rules[group]
        record = normalize(nutrition)
        meta = (
            product_meta
            if isinstance(product_meta, ProductMeta)
            else ProductMeta.from_mapping(product_meta)
        )

        denied = _find_denied(meta, rules.denylist)
        if denied is not None:
            return _avoid_result(rules, denied)

        warnings: list[str] = []
        positives: list[str] = []
        severity = 0

        for limit in rules.limits:
            tier_severity, warning, positive = _evaluate_limit(
                getattr(record, limit.field_name), limit
            )
            severity += tier_severity
            if warning:
                warnings.append(warning)
            if positive and limit.report_positive:
                positives.append(positive)

        if rules.caffeine_limit_mg is not None:
            caffeine = record.caffeine or estimate_caffeine_mg(meta.ingredients_text)
            if caffeine > rules.caffeine_limit_mg:
                warnings.append(
                    f"Contains caffeine ({caffeine:g}mg) - "
                    f"not recommended during {rules.group_name}"
                )
                severity += rules.caffeine_increment

        positives.extend(_essential_positives(record, rules.essential_nutrients))
        if record.fiber >= GOOD_FIBER_GRAMS:
            positives.append(
                f"Good fiber content ({record.fiber:.1f}g) - "
                "supports digestive health"
            )

        for rule in rules.warning_rules:
            message = _triggered_message(rule, record, meta)
            if message is not None:
                warnings.append(message)
                severity += rule.increment

        if severity >= AVOID_SEVERITY:
            suitability = Suitability.AVOID
        elif severity >= MODERATE_SEVERITY:
            suitability = Suitability.MODERATE
        else:
            suitability = Suitability.GOOD

        unreported = record.unreported_among(
            limit.field_name for limit in rules.limits
        )
        style = SUITABILITY_STYLES[suitability]
        return PopulationEvaluation(
            target_group=group.value,
            suitability=suitability,
            severity_score=severity,
            warnings=tuple(warnings),
            positives=tuple(positives),
            explanation=_explanation(
                suitability, rules.group_name, warnings, positives, unreported
            ),
            label=style.label,
            emoji=style.emoji,
            color=style.color,
            display_name=rules.display_name,
            disclaimer=rules.disclaimer,
            unreported_nutrients=unreported,
        )


def _group_label(target_group: object) -> str:
    if isinstance(target_group, TargetGroup):
        return target_group.value
    return str(target_group)


def _find_denied(meta: ProductMeta, denylist: tuple[str, ...]) -> str | None:
    ingredients = meta.ingredients_text.lower()
    name = meta.name.lower()
    for term in denylist:
        needle = term.lower()
        if needle in ingredients or needle in name:
            return term
    return None


def _evaluate_limit(
    value: float, limit: NutrientLimit
) -> tuple[int, str | None, str | None]:
    """Return (severity, warning, positive) for one three-tier limit."""
    if value <= limit.safe:
        return 0, None, f"Low {limit.label} ({value:.1f}g) - excellent"
    if value <= limit.moderate:
        return (
            MODERATE_TIER_SEVERITY,
            f"Moderate {limit.label} ({value:.1f}g) - {limit.reason}",
            None,
        )
    prefix = "Very high" if value > limit.avoid else "High"
    return (
        HIGH_TIER_SEVERITY,
        f"{prefix} {limit.label} ({value:.1f}g) - {limit.reason}",
        None,
    )


def _essential_positives(
    record: NutritionRecord, minimums: Mapping[str, float]
) -> list[str]:
    positives = []
    for nutrient, default_minimum, message in _ESSENTIAL_CHECKS:
        minimum = minimums.get(nutrient, default_minimum)
        if minimum is None:
            continue
        value = getattr(record, nutrient)
        if value > 0 and value >= minimum:
            positives.append(message.format(value=value))
    return positives


def _triggered_message(
    rule: WarningRule, record: NutritionRecord, meta: ProductMeta
) -> str | None:
    """Dispatch on the rule variant; return its message if it fires."""
    if isinstance(rule, NutrientRule):
        return rule.message if rule.predicate(record) else None
    if isinstance(rule, ProductMetaRule):
        return rule.message if rule.predicate(meta) else None
    if isinstance(rule, AllergenRule):
        declared = {_allergen_key(item) for item in meta.allergens}
        return rule.message if declared & set(rule.allergens) else None
    if isinstance(rule, IngredientRule):
        text = meta.ingredients_text.lower()
        found = [term for term in rule.terms if term.lower() in text]
        if not found:
            return None
        if rule.list_matches:
            return f"Contains: {', '.join(found)} - {rule.message}"
        return rule.message
    raise TypeError(f"Unsupported warning rule: {rule!r}")


def _allergen_key(value: str) -> str:
    """Normalize allergen tags such as ``en:peanuts`` to ``peanuts``."""
    return value.split(":", 1)[-1].strip().lower().replace("-", " ")


def _explanation(
    suitability: Suitability,
    group_name: str,
    warnings: list[str],
    positives: list[str],
    unreported: tuple[str, ...],
) -> str:
    if suitability is Suitability.GOOD:
        text = f"This product appears suitable for {group_name}. "
        if positives:
            text += f"Positive aspects: {'; '.join(positives[:2])}. "
        if warnings:
            text += f"Minor considerations: {warnings[0]}"
    elif suitability is Suitability.MODERATE:
        text = (
            f"This product can be consumed occasionally by {group_name}, "
            "but should not be a regular choice. "
        )
        if warnings:
            text += f"Concerns: {'; '.join(warnings[:2])}. "
        text += "Monitor portion sizes and frequency."
    else:
        text = f"This product is not recommended for {group_name}. "
        if warnings:
            text += f"Main concerns: {'; '.join(warnings[:3])}. "
        text += "Choose alternative products better suited for this population."
    if unreported:
        names = ", ".join(name.replace("_", " ") for name in unreported)
        text = text.rstrip() + f" Not reported on the label: {names}."
    return text.strip()


def _avoid_result(rules: PopulationRules, term: str) -> PopulationEvaluation:
    style = SUITABILITY_STYLES[Suitability.AVOID]
    return PopulationEvaluation(
        target_group=rules.target_group.value,
        suitability=Suitability.AVOID,
        severity_score=SHORT_CIRCUIT_SEVERITY,
        warnings=(
            f"Contains {term} - strictly not recommended for {rules.group_name}",
        ),
        positives=(),
        explanation=(
            "This product contains ingredients that should be avoided by "
            f"{rules.audience} due to safety concerns."
        ),
        label=style.label,
        emoji=style.emoji,
        color=style.color,
        display_name=rules.display_name,
        disclaimer=rules.disclaimer,
    )


def _insufficient_data(target_group: str) -> PopulationEvaluation:
    style = SUITABILITY_STYLES[Suitability.INSUFFICIENT_DATA]
    return PopulationEvaluation(
        target_group=target_group,
        suitability=Suitability.INSUFFICIENT_DATA,
        severity_score=None,
        warnings=("Not enough nutrition information to evaluate safety",),
        positives=(),
        explanation=(
            "This product lacks sufficient nutrition data for a proper safety "
            "assessment."
        ),
        label=style.label,
        emoji=style.emoji,
        color=style.color,
        display_name=target_group,
        disclaimer=f"Unable to evaluate - insufficient product data. {DISCLAIMER}",
    )


DEFAULT_POPULATION_ENGINE = PopulationSafetyEngine()


def evaluate_population_safety(
    nutrition: NutritionRecord | Mapping[str, object] | None,
    target_group: TargetGroup | str,
    product_meta: ProductMeta | Mapping[str, object] | None = None,
) -> PopulationEvaluation:
    """Evaluate a product with the default guideline sets."""
    return DEFAULT_POPULATION_ENGINE.evaluate(nutrition, target_group, product_meta)
