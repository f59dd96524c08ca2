"""
Health check endpoint tests.

Validates basic test infrastructure and the shared error envelope.
"""

from httpx import AsyncClient


class TestHealthCheck:
    """Tests for GET /api/v1/health."""

    async def test_health_returns_200(self, async_client: AsyncClient):
        """Health check endpoint returns 200 OK."""
        response = await async_client.get("/api/v1/health")
        assert response.status_code == 200

    async def test_health_returns_healthy_status(self, async_client: AsyncClient):
        """Health check returns status: healthy."""
        response = await async_client.get("/api/v1/health")
        data = response.json()
        assert data["status"] == "healthy"

    async def test_health_sets_request_id(self, async_client: AsyncClient):
        """Every response carries a request id header."""
        response = await async_client.get("/api/v1/health")
        assert response.headers.get("X-Request-ID")


class TestErrorEnvelope:
    """Service errors share one body shape."""

    async def test_board_error_body(self, async_client: AsyncClient):
        """Unauthenticated calls report code, message and request id."""
        response = await async_client.get("/api/v1/users/me")
        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "unauthenticated"
        assert error["message"]
        assert error["request_id"] == response.headers["X-Request-ID"]

    async def test_validation_error_body(self, async_client: AsyncClient):
        """Malformed query parameters become validation_failed."""
        response = await async_client.get("/api/v1/threads", params={"page": 0})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_failed"
