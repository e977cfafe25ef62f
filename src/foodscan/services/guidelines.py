"""Population safety guideline sets.

Pregnancy limits follow WHO, NHS and ACOG guidance; child limits follow AAP,
WHO and NHS pediatric guidance. All amounts are per 100g.
"""

from types import MappingProxyType

from foodscan.domain.nutrition import TargetGroup
from foodscan.domain.population import (
    AllergenRule,
    IngredientRule,
    NutrientLimit,
    NutrientRule,
    PopulationRules,
    ProductMeta,
    ProductMetaRule,
)

DISCLAIMER = "This information is for awareness only, not medical advice."

ULTRA_PROCESSED_NOVA = 4

# Keyword -> estimated caffeine in mg, checked in order.
CAFFEINE_KEYWORDS: tuple[tuple[str, float], ...] = (
    ("coffee", 80),
    ("espresso", 120),
    ("tea", 30),
    ("chocolate", 10),
    ("cocoa", 10),
    ("energy", 100),
)


def _is_ultra_processed(meta: ProductMeta) -> bool:
    return (meta.nova_group or 0) >= ULTRA_PROCESSED_NOVA


def _is_choking_hazard(meta: ProductMeta) -> bool:
    name = meta.name.lower()
    return any(
        item in name
        for item in ("whole nut", "popcorn", "hard candy", "gum", "marshmallow")
    )


PREGNANT_RULES = PopulationRules(
    target_group=TargetGroup.PREGNANT,
    group_name="pregnancy",
    audience="pregnant women",
    display_name="🤰 Pregnant Women",
    disclaimer=(
        f"{DISCLAIMER} Consult your healthcare provider for personalized dietary "
        "guidance during pregnancy."
    ),
    denylist=(
        # artificial sweeteners
        "aspartame",
        "sucralose",
        "saccharin",
        "acesulfame",
        # high-risk additives
        "msg",
        "monosodium glutamate",
        "sodium benzoate",
        # raw or unpasteurized
        "raw milk",
        "unpasteurized",
        "raw egg",
        # vitamin A (teratogenic)
        "retinol",
        "retinyl palmitate",
        "liver",
        # alcohol
        "alcohol",
        "ethanol",
        "wine",
        "beer",
        # high-mercury fish
        "shark",
        "swordfish",
        "king mackerel",
        "tilefish",
    ),
    limits=(
        NutrientLimit(
            field_name="sugar",
            label="sugar",
            safe=3,
            moderate=5,
            avoid=10,
            reason="Excess sugar increases gestational diabetes risk",
            report_positive=True,
        ),
        NutrientLimit(
            field_name="salt",
            label="salt",
            safe=0.2,
            moderate=0.3,
            avoid=0.5,
            reason="High salt can cause swelling and high blood pressure",
            report_positive=True,
        ),
        NutrientLimit(
            field_name="saturated_fat",
            label="saturated fat",
            safe=3,
            moderate=5,
            avoid=8,
            reason="High saturated fat affects cardiovascular health",
        ),
    ),
    essential_nutrients=MappingProxyType(
        {
            "protein": 5,
            "fiber": 3,
            "iron": 0.002,
            "calcium": 0.1,
            "folate": 0.0001,
        }
    ),
    warning_rules=(
        ProductMetaRule(
            predicate=_is_ultra_processed,
            message="Ultra-processed foods may lack essential nutrients",
        ),
        NutrientRule(
            predicate=lambda n: n.protein < 2,
            message=(
                "Low protein content - ensure adequate protein from other sources"
            ),
        ),
        NutrientRule(
            predicate=lambda n: n.calories > 400,
            message="Very high calorie density - monitor portion sizes",
        ),
        NutrientRule(
            predicate=lambda n: n.vitamin_a > 0.0008,
            message="High vitamin A may be unsafe during pregnancy",
        ),
        IngredientRule(
            terms=("e102", "e110", "e122", "e129", "e951", "e952"),
            message=(
                "Contains artificial additives - choose natural alternatives "
                "when possible"
            ),
        ),
    ),
    caffeine_limit_mg=20,
)


CHILD_RULES = PopulationRules(
    target_group=TargetGroup.CHILD,
    group_name="young children",
    audience="children under 6",
    display_name="👶 Children Under 6",
    disclaimer=(
        f"{DISCLAIMER} Consult your pediatrician for specific dietary advice "
        "for your child."
    ),
    denylist=(
        "caffeine",
        "coffee",
        "tea",
        "energy drink",
        "artificial sweetener",
        "diet",
        "zero sugar",
        "alcohol",
        "raw honey",
        # choking hazards
        "whole nuts",
        "popcorn",
        "high fructose corn syrup",
    ),
    limits=(
        NutrientLimit(
            field_name="sugar",
            label="sugar",
            safe=2,
            moderate=3,
            avoid=5,
            reason="Excess sugar causes tooth decay and unhealthy eating habits",
            report_positive=True,
        ),
        NutrientLimit(
            field_name="salt",
            label="salt",
            safe=0.1,
            moderate=0.2,
            avoid=0.3,
            reason="Young kidneys cannot process excess sodium",
            report_positive=True,
        ),
        NutrientLimit(
            field_name="saturated_fat",
            label="saturated fat",
            safe=2,
            moderate=3,
            avoid=5,
            reason="High saturated fat affects heart health development",
        ),
        NutrientLimit(
            field_name="fat",
            label="fat",
            safe=8,
            moderate=10,
            avoid=15,
            reason="Excess fat can lead to childhood obesity",
        ),
    ),
    essential_nutrients=MappingProxyType(
        {
            "protein": 3,
            "calcium": 0.15,
            "iron": 0.001,
        }
    ),
    warning_rules=(
        ProductMetaRule(
            predicate=_is_choking_hazard,
            message="⚠️ CHOKING HAZARD - Not safe for children under 4 years",
        ),
        AllergenRule(
            allergens=("peanuts", "tree nuts", "shellfish", "fish"),
            message=(
                "Contains common allergens - introduce carefully and monitor "
                "for reactions"
            ),
        ),
        NutrientRule(
            predicate=lambda n: n.protein < 2 and n.fiber < 1,
            message="Low nutritional value - not ideal for growing children",
        ),
        ProductMetaRule(
            predicate=_is_ultra_processed,
            message="Ultra-processed food - choose whole foods when possible",
        ),
        IngredientRule(
            terms=(
                "chocolate",
                "cocoa",
                "artificial color",
                "artificial flavour",
                "preservative",
                "e-number",
                "hydrogenated",
                "partially hydrogenated",
                "palm oil",
                "corn syrup",
            ),
            message="limit consumption",
            increment=10,
            list_matches=True,
        ),
    ),
)

DEFAULT_RULES = MappingProxyType(
    {
        TargetGroup.PREGNANT: PREGNANT_RULES,
        TargetGroup.CHILD: CHILD_RULES,
    }
)


def estimate_caffeine_mg(ingredients_text: str) -> float:
    """Estimate caffeine per 100g from ingredient keywords."""
    text = ingredients_text.lower()
    for keyword, amount in CAFFEINE_KEYWORDS:
        if keyword in text:
            return amount
    return 0.0
