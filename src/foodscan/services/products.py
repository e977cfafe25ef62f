"""Product lookups against Open Food Facts."""

import asyncio
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from foodscan.adapters.off_client import OpenFoodFactsClient
from foodscan.domain.nutrition import NutritionRecord, ScoreOptions
from foodscan.domain.product import Alternative, ProductRecord, ProductSummary
from foodscan.services.cache import Cache
from foodscan.services.normalizer import coerce_number, normalize
from foodscan.services.scoring import DEFAULT_SCORE_ENGINE, ScoreEngine

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400/6366f1/ffffff?text=No+Image"
ALTERNATIVE_NUTRISCORES = "a,b"
ALTERNATIVE_PAGE_SIZE = 15
RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})

_BARCODE_PATTERN = re.compile(r"^\d{8,14}$")

# Canonical field -> Open Food Facts nutriment keys and unit factor.
_NUTRIMENT_KEYS: dict[str, tuple[tuple[str, ...], float]] = {
    "calories": (("energy-kcal_100g", "energy-kcal"), 1.0),
    "sugar": (("sugars_100g", "sugars"), 1.0),
    "fat": (("fat_100g", "fat"), 1.0),
    "saturated_fat": (("saturated-fat_100g", "saturated-fat"), 1.0),
    "salt": (("salt_100g", "salt"), 1.0),
    "sodium": (("sodium_100g", "sodium"), 1.0),
    "protein": (("proteins_100g", "proteins"), 1.0),
    "fiber": (("fiber_100g", "fiber"), 1.0),
    "carbs": (("carbohydrates_100g", "carbohydrates"), 1.0),
    # reported in grams, tracked in mg
    "caffeine": (("caffeine_100g",), 1000.0),
    "vitamin_a": (("vitamin-a_100g",), 1.0),
    "calcium": (("calcium_100g",), 1.0),
    "iron": (("iron_100g",), 1.0),
    "folate": (("folates_100g", "vitamin-b9_100g"), 1.0),
}

_ALLERGEN_TAGS: dict[str, tuple[str, ...]] = {
    "nuts": ("nuts", "peanuts", "tree-nuts"),
    "dairy": ("milk", "dairy"),
    "gluten": ("gluten", "wheat"),
    "soy": ("soy", "soybeans"),
    "eggs": ("eggs",),
    "fish": ("fish",),
    "shellfish": ("crustaceans", "shellfish"),
    "sesame": ("sesame",),
}

_COMPLETENESS_FIELDS = (
    "product_name",
    "brands",
    "ingredients_text",
    "image_url",
    "categories",
    "nutriscore_grade",
)
_COMPLETENESS_NUTRIMENTS = (
    "energy-kcal_100g",
    "sugars_100g",
    "fat_100g",
    "proteins_100g",
)


class ProductLookupError(Exception):
    """Raised when the product database cannot be reached."""


class ProductNotFoundError(ProductLookupError):
    """Raised when a barcode is unknown to the product database."""


class InvalidBarcodeError(ValueError):
    """Raised for barcodes that are not 8-14 digits."""


def clean_barcode(barcode: str) -> str:
    """Strip whitespace from a scanned barcode."""
    return re.sub(r"\s", "", barcode)


def is_valid_barcode(barcode: object) -> bool:
    """Return whether a barcode is 8-14 digits once whitespace is removed."""
    if not isinstance(barcode, str) or not barcode:
        return False
    return bool(_BARCODE_PATTERN.match(clean_barcode(barcode)))


@dataclass
class ProductService:
    """Service for product lookups with caching and retry."""

    off_client: OpenFoodFactsClient
    cache: Cache
    score_engine: ScoreEngine = DEFAULT_SCORE_ENGINE
    product_ttl_seconds: int = 86400
    search_ttl_seconds: int = 3600
    retry_attempts: int = 3
    retry_delay_seconds: float = 1.0
    debug: bool = False

    async def get_product(
        self, barcode: str, *, force_refresh: bool = False
    ) -> ProductRecord:
        """Fetch and parse a product by barcode."""
        if not is_valid_barcode(barcode):
            raise InvalidBarcodeError(f"Invalid barcode: {barcode!r}")
        code = clean_barcode(barcode)
        cache_key = f"off:product:{code}"
        if not force_refresh:
            cached = self.cache.get(cache_key)
            if isinstance(cached, ProductRecord):
                return cached

        payload = await self._call_with_retry(
            lambda: self._fetch_product(code), action=f"get_product:{code}"
        )
        product = parse_product(payload["product"], code)
        self.cache.set(cache_key, product, ttl_seconds=self.product_ttl_seconds)
        if self.debug:
            _logger.info(
                "Product fetched: barcode=%s completeness=%s",
                code,
                product.completeness,
            )
        return product

    async def search(  # noqa: PLR0913
        self,
        query: str,
        *,
        page: int = 1,
        page_size: int = 20,
        categories: str | None = None,
        nutriscore_grades: str | None = None,
    ) -> list[ProductSummary]:
        """Search products with caching."""
        raw_products = await self._search_raw(
            query,
            page=page,
            page_size=page_size,
            categories=categories,
            nutriscore_grades=nutriscore_grades,
        )
        return [_parse_summary(raw) for raw in raw_products]

    async def find_alternatives(
        self,
        product: ProductRecord,
        options: ScoreOptions | None = None,
        limit: int = 5,
    ) -> list[Alternative]:
        """Return products from the same category that score higher."""
        category = product.categories.split(",")[0].strip()
        if not category:
            return []
        resolved = options or ScoreOptions()
        current_score = self.score_engine.score(product.nutrition, resolved).score
        try:
            candidates = await self._search_raw(
                "",
                page_size=ALTERNATIVE_PAGE_SIZE,
                categories=category,
                nutriscore_grades=ALTERNATIVE_NUTRISCORES,
            )
        except ProductLookupError as exc:
            _logger.warning("Alternatives lookup failed for %s: %s", category, exc)
            return []

        alternatives = []
        for raw in candidates:
            name = raw.get("product_name")
            if not name or raw.get("code") == product.barcode:
                continue
            score = self.score_engine.score(
                extract_nutrition(raw.get("nutriments")), resolved
            ).score
            if score <= current_score:
                continue
            alternatives.append(
                Alternative(
                    name=str(name),
                    brand=str(raw.get("brands") or ""),
                    score=score,
                    nutriscore=raw.get("nutriscore_grade"),
                    image_url=raw.get("image_url"),
                    improvement=score - current_score,
                )
            )
        alternatives.sort(key=lambda item: item.improvement, reverse=True)
        return alternatives[:limit]

    def clear_cache(self) -> None:
        """Drop every cached product and search result."""
        self.cache.clear()

    async def _fetch_product(self, barcode: str) -> dict[str, object]:
        payload = await self.off_client.get_product(barcode)
        if payload.get("status") == 0 or not payload.get("product"):
            raise ProductNotFoundError(f"Product not found: {barcode}")
        return payload

    async def _search_raw(  # noqa: PLR0913
        self,
        query: str,
        *,
        page: int = 1,
        page_size: int = 20,
        categories: str | None = None,
        nutriscore_grades: str | None = None,
    ) -> list[dict[str, object]]:
        cache_key = (
            f"off:search:{query.lower()}:{page}:{page_size}:"
            f"{categories or ''}:{nutriscore_grades or ''}"
        )
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.off_client.search_products(
                query,
                page=page,
                page_size=page_size,
                categories=categories,
                nutriscore_grades=nutriscore_grades,
            ),
            action="search",
        )
        products = [
            raw for raw in payload.get("products") or [] if isinstance(raw, Mapping)
        ]
        self.cache.set(cache_key, products, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info("Product search: query=%s results=%s", query, len(products))
        return products

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function, backing off linearly between attempts."""
        attempts = max(1, self.retry_attempts)
        attempt = 0
        while True:
            attempt += 1
            try:
                return await func()
            except ProductNotFoundError:
                raise
            except Exception as exc:
                status_code = _status_code_from_exception(exc)
                _logger.warning(
                    "Open Food Facts %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    attempts,
                    status_code,
                    exc,
                )
                if attempt >= attempts or not _is_transient(exc):
                    raise ProductLookupError(
                        f"Failed to {action} after {attempt} attempts: {exc}"
                    ) from exc
                await asyncio.sleep(self.retry_delay_seconds * attempt)


def _response_status(exc: Exception) -> int | None:
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    return status_code if isinstance(status_code, int) else None


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    status_code = _response_status(exc)
    return "n/a" if status_code is None else str(status_code)


def _is_transient(exc: Exception) -> bool:
    """Client errors other than timeouts and rate limits never succeed on retry."""
    status_code = _response_status(exc)
    if status_code is None:
        return True
    return status_code >= 500 or status_code in RETRYABLE_CLIENT_STATUSES


def extract_nutrition(nutriments: object) -> NutritionRecord:
    """Map Open Food Facts per-100g nutriments onto a nutrition record."""
    source = nutriments if isinstance(nutriments, Mapping) else {}
    raw: dict[str, object] = {}
    for field_name, (keys, factor) in _NUTRIMENT_KEYS.items():
        for key in keys:
            value = source.get(key)
            if value is None or value == "":
                continue
            if factor != 1.0:
                number = coerce_number(value)
                if number is not None:
                    value = number * factor
            raw[field_name] = value
            break
    return normalize(raw)


def extract_allergens(allergen_tags: object) -> tuple[str, ...]:
    """Collapse Open Food Facts allergen tags into broad allergen groups."""
    if not isinstance(allergen_tags, (list, tuple)):
        return ()
    tags = [str(tag) for tag in allergen_tags]
    return tuple(
        allergen
        for allergen, needles in _ALLERGEN_TAGS.items()
        if any(needle in tag for tag in tags for needle in needles)
    )


def extract_image_url(raw: Mapping[str, object]) -> str:
    """Pick the best available front image, falling back to a placeholder."""
    url = raw.get("image_url") or raw.get("image_front_url")
    if not url:
        front = (raw.get("images") or {}).get("front") or {}
        url = _localized(front.get("display")) or _localized(front.get("small"))
    if not url:
        front = (raw.get("selected_images") or {}).get("front") or {}
        url = _localized(front.get("display"))
    return str(url) if url else PLACEHOLDER_IMAGE_URL


def _localized(variants: object) -> object | None:
    if not isinstance(variants, Mapping):
        return None
    return variants.get("en") or variants.get("fr")


def calculate_completeness(raw: Mapping[str, object]) -> int:
    """Score 0-100 in steps of 10 for each key attribute present."""
    nutriments = raw.get("nutriments")
    if not isinstance(nutriments, Mapping):
        nutriments = {}
    present = [raw.get(key) for key in _COMPLETENESS_FIELDS] + [
        nutriments.get(key) for key in _COMPLETENESS_NUTRIMENTS
    ]
    return min(100, 10 * sum(1 for value in present if value not in (None, "")))


def parse_product(raw: Mapping[str, object], barcode: str) -> ProductRecord:
    """Build a product record from an Open Food Facts product payload."""
    modified = raw.get("last_modified_t")
    nova = raw.get("nova_group")
    return ProductRecord(
        barcode=barcode,
        name=str(
            raw.get("product_name") or raw.get("product_name_en") or "Unknown Product"
        ),
        brand=str(raw.get("brands") or "Unknown Brand"),
        image_url=extract_image_url(raw),
        nutrition=extract_nutrition(raw.get("nutriments")),
        ingredients_text=str(
            raw.get("ingredients_text") or raw.get("ingredients_text_en") or ""
        ),
        allergens=extract_allergens(raw.get("allergens_tags")),
        categories=str(raw.get("categories") or ""),
        nutriscore=raw.get("nutriscore_grade") or None,
        nova_group=int(nova) if isinstance(nova, (int, float)) else None,
        ecoscore=raw.get("ecoscore_grade") or None,
        last_modified=(
            datetime.fromtimestamp(modified, tz=UTC)
            if isinstance(modified, (int, float))
            else None
        ),
        completeness=calculate_completeness(raw),
    )


def _parse_summary(raw: Mapping[str, object]) -> ProductSummary:
    nova = raw.get("nova_group")
    return ProductSummary(
        barcode=raw.get("code"),
        name=str(raw.get("product_name") or "Unknown Product"),
        brand=str(raw.get("brands") or ""),
        image_url=raw.get("image_url"),
        nutriscore=raw.get("nutriscore_grade"),
        nova_group=int(nova) if isinstance(nova, (int, float)) else None,
    )
