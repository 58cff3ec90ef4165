import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kyuden.api import cards_router, decks_router, health_router
from kyuden.api.state import CatalogState
from kyuden.config import settings
from kyuden.models.failure import KnownError, create_known_failure, create_unknown_failure
from kyuden.services.card_catalog import load_catalog_or_empty
from kyuden.services.image_cache import ImagePathCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the card catalog on startup; persist the image cache on shutdown."""
    catalog, error = load_catalog_or_empty(settings.card_data_path)
    images = ImagePathCache.load(settings.image_cache_path)
    app.state.catalog_state = CatalogState(catalog=catalog, error=error, images=images)

    yield

    if settings.image_cache_path is not None:
        images.save(settings.image_cache_path)


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    version=pkg_version("kyuden"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, error: KnownError) -> JSONResponse:
    """Render domain failures as the standard failure envelope."""
    logger.info("Request failed: %s (%s)", error.message, error.kind.value)
    return JSONResponse(
        status_code=error.status_code,
        content=create_known_failure(error).model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, error: Exception) -> JSONResponse:
    """Anything unclassified becomes an unknown failure."""
    logger.exception("Unhandled error: %s", error)
    return JSONResponse(
        status_code=500,
        content=create_unknown_failure(error).model_dump(mode="json"),
    )


app.include_router(cards_router)
app.include_router(decks_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
