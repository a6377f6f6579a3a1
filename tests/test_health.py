"""Integration tests for health check endpoints."""

from unittest.mock import AsyncMock

import httpx
from httpx import ASGITransport, AsyncClient

from guider import __version__
from guider.api.app import create_app
from guider.config import LLMSettings
from guider.llm.client import OpenRouterClient
from guider.pipeline import CompletionPipeline


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    async def test_health_returns_200(self, client: AsyncClient) -> None:
        """Health endpoint returns 200 OK."""
        response = await client.get("/health")
        assert response.status_code == 200

    async def test_health_returns_status(self, client: AsyncClient) -> None:
        """Health endpoint returns healthy status."""
        response = await client.get("/health")
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__

    async def test_health_returns_timestamp(self, client: AsyncClient) -> None:
        """Health endpoint returns ISO timestamp."""
        response = await client.get("/health")
        assert "T" in response.json()["timestamp"]


class TestReadinessEndpoint:
    """Tests for /health/ready endpoint."""

    async def test_not_ready_without_pipeline(self, client: AsyncClient) -> None:
        """Readiness reports the missing pipeline."""
        response = await client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["checks"]["config"] == "ok"
        assert data["checks"]["pipeline"] == "not_configured"

    async def test_ready_with_pipeline(self) -> None:
        """Readiness is ready once a pipeline is attached."""
        app = create_app(pipeline=AsyncMock(spec=CompletionPipeline))

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health/ready")

        data = response.json()
        assert data["status"] == "ready"
        assert "timestamp" in data

    async def test_reports_upstream_client(self, llm_settings: LLMSettings) -> None:
        """Readiness describes the upstream client without its key."""
        llm_client = OpenRouterClient(llm_settings, client=AsyncMock(spec=httpx.AsyncClient))
        app = create_app(llm_client=llm_client)

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health/ready")

        upstream = response.json()["upstream"]
        assert upstream["service"] == "openrouter"
        assert upstream["primary_model"] == llm_settings.primary_model
        assert "test-key" not in response.text


class TestLivenessEndpoint:
    """Tests for /health/live endpoint."""

    async def test_liveness_returns_alive(self, client: AsyncClient) -> None:
        """Liveness endpoint returns alive status."""
        response = await client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"
