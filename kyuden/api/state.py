"""
Per-process application state shared by the routers.

The catalog is loaded once in the application lifespan. A failed load leaves
an empty catalog plus the load error, so the service stays up and can
report why it has no cards.
"""

from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, Request

from kyuden.models.failure import DataUnavailableError
from kyuden.services.card_catalog import Catalog
from kyuden.services.image_cache import ImagePathCache


@dataclass
class CatalogState:
    """Loaded catalog, its load error (if any), and the artwork cache."""

    catalog: Catalog = field(default_factory=Catalog.empty)
    error: DataUnavailableError | None = None
    images: ImagePathCache = field(default_factory=ImagePathCache)


def get_catalog_state(request: Request) -> CatalogState:
    """
    Dependency that provides the catalog state.

    Usage in FastAPI:
        @router.get("/cards")
        async def list_cards(state: Annotated[CatalogState, Depends(get_catalog_state)]):
            ...
    """
    state: CatalogState | None = getattr(request.app.state, "catalog_state", None)
    if state is None:
        state = CatalogState()
        request.app.state.catalog_state = state
    return state


def get_catalog(state: Annotated[CatalogState, Depends(get_catalog_state)]) -> Catalog:
    """Dependency that provides the loaded catalog (possibly empty)."""
    return state.catalog
