"""Tests for health check endpoints."""

import json
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from kyuden.api.state import CatalogState, get_catalog_state
from kyuden.config import settings
from kyuden.main import app, lifespan
from kyuden.models.failure import DataUnavailableError
from kyuden.services.card_catalog import Catalog


@pytest.fixture
def catalog_state(catalog: Catalog) -> CatalogState:
    return CatalogState(catalog=catalog)


@pytest.fixture
async def client(catalog_state: CatalogState):
    """Provide an async test client with an overridden catalog state."""
    app.dependency_overrides[get_catalog_state] = lambda: catalog_state

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Liveness probe returns healthy."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_health_no_catalog_check(self, client: AsyncClient) -> None:
        """Health endpoint does not include catalog status."""
        data = (await client.get("/health")).json()

        assert data["catalog"] is None


class TestReadyEndpoint:
    async def test_ready_with_catalog(self, client: AsyncClient) -> None:
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["catalog"] == "loaded"
        assert data["cards"] == 8

    async def test_not_ready_after_failed_load(
        self, client: AsyncClient, catalog_state: CatalogState
    ) -> None:
        """A failed load keeps the service up but reports 503."""
        catalog_state.catalog = Catalog.empty()
        catalog_state.error = DataUnavailableError("data/cards.json", detail="File not found")

        response = await client.get("/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not ready"
        assert data["cards"] == 0
        assert data["detail"] == "File not found"


class TestLifespan:
    async def test_missing_data_degrades_to_empty(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "card_data_path", tmp_path / "missing.json")
        monkeypatch.setattr(settings, "image_cache_path", None)

        async with lifespan(app):
            state = app.state.catalog_state
            assert len(state.catalog) == 0
            assert isinstance(state.error, DataUnavailableError)

    async def test_loads_catalog_and_saves_image_cache(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        data = tmp_path / "cards.json"
        data.write_text(
            json.dumps([{"id": "1", "name": "Ambush", "category": "strategy", "image_hash": "a1"}]),
            encoding="utf-8",
        )
        image_cache = tmp_path / "images.json"
        monkeypatch.setattr(settings, "card_data_path", data)
        monkeypatch.setattr(settings, "image_cache_path", image_cache)

        async with lifespan(app):
            state = app.state.catalog_state
            assert state.error is None
            state.images.resolve(state.catalog.get("1"))

        assert json.loads(image_cache.read_text(encoding="utf-8")) == {
            "Ambush": "images/cards/a1.jpg"
        }
