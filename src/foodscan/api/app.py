"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from foodscan.api.models import AnalyzeRequest, PopulationRequest, PreferencesIn
from foodscan.app_logging import configure_logging
from foodscan.containers import AppContainer
from foodscan.domain.product import ProductRecord
from foodscan.services.enricher import DEFAULT_TARGET_GROUPS
from foodscan.services.products import (
    InvalidBarcodeError,
    ProductLookupError,
    ProductNotFoundError,
)


def preferences_from_query(  # noqa: PLR0913
    gender: str | None = None,
    calorie_goal: float | None = None,
    is_diabetic: bool = False,
    diabetic_type: str | None = None,
    activity_level: str | None = None,
    profile: str | None = None,
    dietary_preferences: str | None = None,
) -> PreferencesIn:
    """Read preferences from query parameters; dietary preferences are CSV."""
    return PreferencesIn(
        gender=gender,
        calorie_goal=calorie_goal,
        is_diabetic=is_diabetic,
        diabetic_type=diabetic_type,
        activity_level=activity_level,
        profile=profile,
        dietary_preferences=[
            item.strip()
            for item in (dietary_preferences or "").split(",")
            if item.strip()
        ],
    )


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    async def load_product(barcode: str, request: Request) -> ProductRecord:
        state_container: AppContainer = request.app.state.container
        try:
            return await state_container.product_service.get_product(barcode)
        except InvalidBarcodeError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except ProductNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc
        except ProductLookupError as exc:
            logger.warning("Product lookup failed for %s: %s", barcode, exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
            ) from exc

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analyze")
    async def analyze(payload: AnalyzeRequest, request: Request) -> dict[str, object]:
        """Run every engine over caller-supplied nutrition facts."""
        state_container: AppContainer = request.app.state.container
        report = state_container.enricher.analyze(
            payload.nutrition,
            payload.preferences.to_options(),
            payload.product.to_meta(),
            payload.target_groups or DEFAULT_TARGET_GROUPS,
        )
        return jsonable_encoder(report)

    @app.post("/population/{target_group}")
    async def population(
        target_group: str, payload: PopulationRequest, request: Request
    ) -> dict[str, object]:
        """Evaluate suitability for one vulnerable population."""
        state_container: AppContainer = request.app.state.container
        evaluation = state_container.enricher.population_engine.evaluate(
            payload.nutrition, target_group, payload.product.to_meta()
        )
        return jsonable_encoder(evaluation)

    @app.get("/products/{barcode}")
    async def product(
        barcode: str,
        request: Request,
        preferences: PreferencesIn = Depends(preferences_from_query),
    ) -> dict[str, object]:
        """Look up a product and attach its nutrition report."""
        state_container: AppContainer = request.app.state.container
        record = await load_product(barcode, request)
        enriched = state_container.enricher.enrich(record, preferences.to_options())
        return jsonable_encoder(enriched)

    @app.get("/products/{barcode}/alternatives")
    async def alternatives(
        barcode: str,
        request: Request,
        limit: int = 5,
        preferences: PreferencesIn = Depends(preferences_from_query),
    ) -> dict[str, object]:
        """List higher-scoring products from the same category."""
        state_container: AppContainer = request.app.state.container
        record = await load_product(barcode, request)
        items = await state_container.product_service.find_alternatives(
            record, preferences.to_options(), limit=limit
        )
        return {"alternatives": jsonable_encoder(items)}

    @app.get("/search")
    async def search(  # noqa: PLR0913
        q: str,
        request: Request,
        page: int = 1,
        page_size: int = 20,
        categories: str | None = None,
        nutriscore: str | None = None,
    ) -> dict[str, object]:
        """Search the product database."""
        state_container: AppContainer = request.app.state.container
        try:
            products = await state_container.product_service.search(
                q,
                page=page,
                page_size=page_size,
                categories=categories,
                nutriscore_grades=nutriscore,
            )
        except ProductLookupError as exc:
            logger.warning("Product search failed for %r: %s", q, exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
            ) from exc
        return {"products": jsonable_encoder(products)}

    return app
