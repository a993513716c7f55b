"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient


class TestHealthEndpoint:
    """Tests for the liveness endpoint."""

    @pytest.mark.asyncio
    async def test_health_is_public(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_returns_correct_structure(self, client: AsyncClient) -> None:
        data = (await client.get("/health")).json()

        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["database"] is None
        assert {"timestamp", "environment"} <= data.keys()

    @pytest.mark.asyncio
    async def test_health_carries_tracking_headers(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert "x-request-id" in response.headers
        assert response.headers["x-content-type-options"] == "nosniff"

    @pytest.mark.asyncio
    async def test_api_routes_require_auth(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/tenants/5/groups")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"
