"""Open Food Facts API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

SEARCH_FIELDS = (
    "code,product_name,brands,image_url,nutriscore_grade,nova_group,"
    "nutriments,categories"
)


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts API interactions."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""

    async def search_products(  # noqa: PLR0913
        self,
        query: str,
        *,
        page: int = 1,
        page_size: int = 20,
        categories: str | None = None,
        nutriscore_grades: str | None = None,
    ) -> dict[str, object]:
        """Search products and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    user_agent: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, base_url: str, user_agent: str, timeout_seconds: float = 10.0
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            user_agent=user_agent,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode.

        Unknown barcodes come back as HTTP 404 with a ``status`` of 0 in the
        body; that payload is returned rather than raised.
        """
        response = await self.http_client.get(
            f"{self.base_url}/product/{barcode}",
            headers=self._headers(),
            timeout=self.timeout_seconds,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return {"status": 0, "code": barcode}
        response.raise_for_status()
        return response.json()

    async def search_products(  # noqa: PLR0913
        self,
        query: str,
        *,
        page: int = 1,
        page_size: int = 20,
        categories: str | None = None,
        nutriscore_grades: str | None = None,
    ) -> dict[str, object]:
        """Search products by free text, category and Nutri-Score grade."""
        params: dict[str, str | int] = {
            "page": page,
            "page_size": page_size,
            "fields": SEARCH_FIELDS,
        }
        if query:
            params["search_terms"] = query
        if categories:
            params["categories_tags"] = categories
        if nutriscore_grades:
            params["nutriscore_grade"] = nutriscore_grades
        response = await self.http_client.get(
            f"{self.base_url}/search",
            params=params,
            headers=self._headers(),
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/json"}
