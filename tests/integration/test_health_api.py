"""Integration tests for health and metrics endpoints."""

import pytest
from httpx import AsyncClient

from textlens import __version__
from tests.conftest import SHORT_TEXT


class TestHealthEndpoints:
    """Tests for /health, /health/live and /health/ready."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "textlens"
        assert data["version"] == __version__
        assert data["components"]["database"]["status"] == "healthy"
        assert data["components"]["llm"]["status"] == "healthy"
        assert data["components"]["admission_queue"]["details"]["max_concurrent"] == 2

    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient):
        response = await client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_readiness(self, client: AsyncClient):
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    @pytest.mark.asyncio
    async def test_not_ready_without_database(self, client: AsyncClient):
        import textlens.core.database as db_module

        db_module._engine = None

        response = await client.get("/health/ready")

        assert response.json()["status"] == "not_ready"


class TestMetricsEndpoint:
    """Tests for /metrics."""

    @pytest.mark.asyncio
    async def test_exposes_request_and_queue_metrics(self, client: AsyncClient):
        await client.post("/analyze", json={"text": SHORT_TEXT})

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in response.text
        assert 'admission_admitted_total{queue="test"}' in response.text
        assert "analyses_stored_total" in response.text
