"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from foodscan.adapters.off_client import HttpxOpenFoodFactsClient, OpenFoodFactsClient
from foodscan.config import Settings
from foodscan.services.cache import Cache, InMemoryCache
from foodscan.services.enricher import ProductEnricher
from foodscan.services.products import ProductService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    off_client: OpenFoodFactsClient
    cache: Cache
    product_service: ProductService
    enricher: ProductEnricher
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
        timeout_seconds=resolved_settings.off_timeout_seconds,
    )
    cache = InMemoryCache()
    enricher = ProductEnricher()
    product_service = ProductService(
        off_client=off_client,
        cache=cache,
        score_engine=enricher.score_engine,
        product_ttl_seconds=resolved_settings.product_cache_ttl_seconds,
        search_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        retry_attempts=resolved_settings.off_retry_attempts,
        retry_delay_seconds=resolved_settings.off_retry_delay_seconds,
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        off_client=off_client,
        cache=cache,
        product_service=product_service,
        enricher=enricher,
        close_resources=close_resources,
    )
