"""Shared test fixtures."""

from dataclasses import dataclass, field

import httpx
import pytest

from foodscan.adapters.off_client import OpenFoodFactsClient
from foodscan.config import Settings
from foodscan.containers import AppContainer
from foodscan.services.cache import InMemoryCache
from foodscan.services.enricher import ProductEnricher
from foodscan.services.products import ProductService

OAT_BARCODE = "3017620422003"
COOKIE_BARCODE = "5000159407236"


def off_product(**overrides: object) -> dict[str, object]:
    """Open Food Facts product payload for a plain oat drink."""
    product: dict[str, object] = {
        "code": OAT_BARCODE,
        "product_name": "Oat Drink",
        "brands": "Oatly",
        "image_url": "https://images.example/oat.jpg",
        "ingredients_text": "Water, oats 10%, rapeseed oil, salt",
        "allergens_tags": ["en:gluten"],
        "categories": "Plant-based milks, Oat milks",
        "nutriscore_grade": "b",
        "nova_group": 3,
        "ecoscore_grade": "a",
        "last_modified_t": 1700000000,
        "nutriments": {
            "energy-kcal_100g": 46,
            "sugars_100g": 4,
            "fat_100g": 1.5,
            "saturated-fat_100g": 0.2,
            "salt_100g": 0.1,
            "proteins_100g": 1,
            "fiber_100g": 0.8,
            "carbohydrates_100g": 6.7,
        },
    }
    product.update(overrides)
    return product


def cookie_product() -> dict[str, object]:
    return off_product(
        code=COOKIE_BARCODE,
        product_name="Chocolate Cookies",
        brands="Crunchy",
        ingredients_text="Wheat flour, sugar, palm oil, cocoa",
        allergens_tags=["en:gluten", "en:milk"],
        categories="Snacks, Biscuits",
        nutriscore_grade="e",
        nova_group=4,
        nutriments={
            "energy-kcal_100g": 495,
            "sugars_100g": 32,
            "fat_100g": 23,
            "saturated-fat_100g": 11,
            "salt_100g": 0.8,
            "proteins_100g": 6,
            "fiber_100g": 3,
            "carbohydrates_100g": 64,
        },
    )


@dataclass
class FakeOffClient(OpenFoodFactsClient):
    """In-memory Open Food Facts client that counts calls."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    search_results: list[dict[str, object]] = field(default_factory=list)
    failures: int = 0
    failure_status: int | None = None
    product_calls: int = 0
    search_calls: int = 0
    last_search: dict[str, object] | None = None

    async def get_product(self, barcode: str) -> dict[str, object]:
        self.product_calls += 1
        self._maybe_fail()
        product = self.products.get(barcode)
        if product is None:
            return {"status": 0, "code": barcode}
        return {"status": 1, "code": barcode, "product": product}

    async def search_products(  # noqa: PLR0913
        self,
        query: str,
        *,
        page: int = 1,
        page_size: int = 20,
        categories: str | None = None,
        nutriscore_grades: str | None = None,
    ) -> dict[str, object]:
        self.search_calls += 1
        self.last_search = {
            "query": query,
            "page": page,
            "page_size": page_size,
            "categories": categories,
            "nutriscore_grades": nutriscore_grades,
        }
        self._maybe_fail()
        return {"count": len(self.search_results), "products": self.search_results}

    async def close(self) -> None:
        return None

    def _maybe_fail(self) -> None:
        if not self.failures:
            return
        self.failures -= 1
        if self.failure_status is None:
            raise RuntimeError("upstream unavailable")
        request = httpx.Request("GET", "https://off.test/api/v2/product")
        response = httpx.Response(self.failure_status, request=request)
        raise httpx.HTTPStatusError(
            f"HTTP {self.failure_status}", request=request, response=response
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(off_retry_delay_seconds=0, environment="test")


@pytest.fixture
def off_client() -> FakeOffClient:
    return FakeOffClient(
        products={OAT_BARCODE: off_product(), COOKIE_BARCODE: cookie_product()}
    )


@pytest.fixture
def product_service(off_client: FakeOffClient) -> ProductService:
    return ProductService(
        off_client=off_client,
        cache=InMemoryCache(),
        retry_attempts=3,
        retry_delay_seconds=0,
    )


@pytest.fixture
def container(
    settings: Settings,
    off_client: FakeOffClient,
    product_service: ProductService,
) -> AppContainer:
    async def close_resources() -> None:
        await off_client.close()

    return AppContainer(
        settings=settings,
        off_client=off_client,
        cache=product_service.cache,
        product_service=product_service,
        enricher=ProductEnricher(),
        close_resources=close_resources,
    )
