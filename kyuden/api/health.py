"""
Health check endpoints.

Provides liveness and readiness probes with a card catalog check.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from kyuden.api.state import CatalogState, get_catalog_state

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    catalog: str | None = None
    cards: int | None = None
    detail: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    state: Annotated[CatalogState, Depends(get_catalog_state)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns ready if the card catalog loaded. Returns 503 with the load error
    if it did not; the service keeps running with an empty catalog.
    """
    if state.error is not None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not ready",
            catalog="unavailable",
            cards=0,
            detail=state.error.detail,
        )
    return HealthResponse(status="ready", catalog="loaded", cards=len(state.catalog))
