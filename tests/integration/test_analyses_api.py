"""Integration tests for GET /analyses/{id} and routing errors."""

import uuid

import pytest
from httpx import AsyncClient

from textlens.schemas.analysis import AnalysisRecord


class TestGetAnalysis:
    """Tests for fetching a stored analysis."""

    @pytest.mark.asyncio
    async def test_found(self, client: AsyncClient, seeded_analyses: list[AnalysisRecord]):
        record = seeded_analyses[0]

        response = await client.get(f"/analyses/{record.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(record.id)
        assert data["text"] == record.text
        assert data["metadata"]["sentiment"] == record.metadata.sentiment.value
        assert data["createdAt"].startswith("2025-01-15T12:00:00")

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient):
        missing = uuid.uuid4()

        response = await client.get(f"/analyses/{missing}")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "RESOURCE_NOT_FOUND"
        assert body["details"] == {"analysis_id": str(missing)}

    @pytest.mark.asyncio
    async def test_invalid_id(self, client: AsyncClient):
        response = await client.get("/analyses/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestRoutingErrors:
    """Unknown routes and methods use the standard error format."""

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json()["status_code"] == 404

    @pytest.mark.asyncio
    async def test_wrong_method(self, client: AsyncClient):
        response = await client.get("/analyze")

        assert response.status_code == 405
        assert response.json()["error"] == "METHOD_NOT_ALLOWED"
