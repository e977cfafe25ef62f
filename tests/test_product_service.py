"""Tests for the product lookup service."""

import asyncio

import pytest

from foodscan.domain.nutrition import ScoreOptions
from foodscan.services.cache import InMemoryCache
from foodscan.services.products import (
    PLACEHOLDER_IMAGE_URL,
    InvalidBarcodeError,
    ProductLookupError,
    ProductNotFoundError,
    ProductService,
    calculate_completeness,
    extract_allergens,
    extract_image_url,
    extract_nutrition,
    is_valid_barcode,
    parse_product,
)
from tests.conftest import (
    COOKIE_BARCODE,
    OAT_BARCODE,
    FakeOffClient,
    cookie_product,
    off_product,
)


@pytest.mark.parametrize(
    ("barcode", "valid"),
    [
        ("3017620422003", True),
        ("12345678", True),
        ("3017 6204 22003", True),
        ("1234567", False),
        ("123456789012345", False),
        ("30176204220AB", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_barcode(barcode: object, valid: bool) -> None:
    assert is_valid_barcode(barcode) is valid


def test_get_product_parses_and_caches(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    product = asyncio.run(product_service.get_product(OAT_BARCODE))

    assert product.name == "Oat Drink"
    assert product.brand == "Oatly"
    assert product.nutrition.calories == 46
    assert product.nutrition.sugar == 4
    assert product.allergens == ("gluten",)
    assert product.nova_group == 3
    assert product.last_modified is not None
    assert product.completeness == 100
    assert off_client.product_calls == 1

    cached = asyncio.run(product_service.get_product(OAT_BARCODE))
    assert cached is product
    assert off_client.product_calls == 1

    asyncio.run(product_service.get_product(OAT_BARCODE, force_refresh=True))
    assert off_client.product_calls == 2


def test_get_product_strips_whitespace(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    product = asyncio.run(product_service.get_product("3017 6204 22003"))

    assert product.barcode == OAT_BARCODE


def test_invalid_barcode_is_rejected_without_lookup(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    with pytest.raises(InvalidBarcodeError):
        asyncio.run(product_service.get_product("abc"))
    assert off_client.product_calls == 0


def test_not_found_is_not_retried(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    with pytest.raises(ProductNotFoundError):
        asyncio.run(product_service.get_product("0000000000000"))
    assert off_client.product_calls == 1


def test_transient_failures_are_retried(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    off_client.failures = 2

    product = asyncio.run(product_service.get_product(OAT_BARCODE))

    assert product.name == "Oat Drink"
    assert off_client.product_calls == 3


def test_exhausted_retries_raise_lookup_error(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    off_client.failures = 5

    with pytest.raises(ProductLookupError) as exc_info:
        asyncio.run(product_service.get_product(OAT_BARCODE))

    assert not isinstance(exc_info.value, ProductNotFoundError)
    assert off_client.product_calls == 3


@pytest.mark.parametrize("status_code", [400, 403])
def test_client_errors_are_not_retried(
    product_service: ProductService, off_client: FakeOffClient, status_code: int
) -> None:
    off_client.failures = 5
    off_client.failure_status = status_code

    with pytest.raises(ProductLookupError):
        asyncio.run(product_service.get_product(OAT_BARCODE))

    assert off_client.product_calls == 1


@pytest.mark.parametrize("status_code", [429, 503])
def test_server_errors_and_rate_limits_are_retried(
    product_service: ProductService, off_client: FakeOffClient, status_code: int
) -> None:
    off_client.failures = 2
    off_client.failure_status = status_code

    product = asyncio.run(product_service.get_product(OAT_BARCODE))

    assert product.name == "Oat Drink"
    assert off_client.product_calls == 3


def test_search_uses_cache(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    off_client.search_results = [off_product(), cookie_product()]

    results = asyncio.run(product_service.search("oat", page_size=2))
    assert [item.name for item in results] == ["Oat Drink", "Chocolate Cookies"]
    assert results[0].barcode == OAT_BARCODE
    assert off_client.search_calls == 1

    asyncio.run(product_service.search("OAT", page_size=2))
    assert off_client.search_calls == 1


def test_find_alternatives_ranks_by_improvement(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    cookie = asyncio.run(product_service.get_product(COOKIE_BARCODE))
    off_client.search_results = [
        cookie_product(),
        off_product(code="1111111111111", product_name="Oat Biscuits"),
        off_product(
            code="2222222222222",
            product_name="Rice Cakes",
            nutriments={"energy-kcal_100g": 380, "sugars_100g": 0.5},
        ),
        off_product(code="3333333333333", product_name=""),
    ]

    alternatives = asyncio.run(
        product_service.find_alternatives(cookie, ScoreOptions(), limit=5)
    )

    assert off_client.last_search == {
        "query": "",
        "page": 1,
        "page_size": 15,
        "categories": "Snacks",
        "nutriscore_grades": "a,b",
    }
    assert [item.name for item in alternatives] == ["Oat Biscuits", "Rice Cakes"]
    improvements = [item.improvement for item in alternatives]
    assert improvements == sorted(improvements, reverse=True)
    assert all(item.improvement > 0 for item in alternatives)


def test_find_alternatives_survives_lookup_failure(
    product_service: ProductService, off_client: FakeOffClient
) -> None:
    cookie = asyncio.run(product_service.get_product(COOKIE_BARCODE))
    off_client.failures = 5

    assert asyncio.run(product_service.find_alternatives(cookie)) == []


def test_find_alternatives_needs_a_category() -> None:
    client = FakeOffClient()
    service = ProductService(client, InMemoryCache(), retry_delay_seconds=0)
    product = parse_product(off_product(categories=""), OAT_BARCODE)

    assert asyncio.run(service.find_alternatives(product)) == []
    assert client.search_calls == 0


def test_extract_nutrition_prefers_per_100g_values() -> None:
    record = extract_nutrition(
        {
            "sugars_100g": 12,
            "sugars": 30,
            "sodium_100g": 0.2,
            "caffeine_100g": 0.032,
        }
    )

    assert record.sugar == 12
    assert record.salt == pytest.approx(0.5)
    assert record.caffeine == pytest.approx(32)
    assert "fat" in record.unreported


def test_extract_nutrition_scales_caffeine_strings() -> None:
    record = extract_nutrition({"caffeine_100g": "0.05"})

    assert record.caffeine == pytest.approx(50)
    assert record.is_reported("caffeine")


def test_extract_allergens_groups_tags() -> None:
    tags = ["en:peanuts", "en:milk", "en:crustaceans", "en:sesame-seeds"]

    assert extract_allergens(tags) == ("nuts", "dairy", "shellfish", "sesame")
    assert extract_allergens(None) == ()


def test_extract_image_url_fallbacks() -> None:
    assert extract_image_url({"image_front_url": "front.jpg"}) == "front.jpg"
    assert (
        extract_image_url({"images": {"front": {"small": {"fr": "petit.jpg"}}}})
        == "petit.jpg"
    )
    assert (
        extract_image_url({"selected_images": {"front": {"display": {"en": "d.jpg"}}}})
        == "d.jpg"
    )
    assert extract_image_url({}) == PLACEHOLDER_IMAGE_URL


def test_completeness_counts_present_fields() -> None:
    assert calculate_completeness({"product_name": "X", "brands": ""}) == 10
    assert calculate_completeness(off_product()) == 100


def test_parse_product_defaults() -> None:
    product = parse_product({}, OAT_BARCODE)

    assert product.name == "Unknown Product"
    assert product.brand == "Unknown Brand"
    assert product.nutriscore is None
    assert product.last_modified is None
    assert product.completeness == 0
