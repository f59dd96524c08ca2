"""
Tests for POST /api/v1/auth/login and /logout.
"""

from httpx import AsyncClient


class TestLogin:
    """Login by mail or by name."""

    async def test_login_with_mail(self, async_client: AsyncClient, test_user: dict):
        response = await async_client.post(
            "/api/v1/auth/login",
            json={"acct": test_user["mail"], "password": test_user["password"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["uid"] == test_user["uid"]
        assert data["access_token"]

    async def test_login_with_name(self, async_client: AsyncClient, test_user: dict):
        response = await async_client.post(
            "/api/v1/auth/login",
            json={"acct": test_user["name"], "password": test_user["password"]},
        )
        assert response.status_code == 200
        assert response.json()["uid"] == test_user["uid"]

    async def test_token_authenticates(
        self, async_client: AsyncClient, test_user: dict, auth_headers
    ):
        response = await async_client.post(
            "/api/v1/auth/login",
            json={"acct": test_user["mail"], "password": test_user["password"]},
        )
        me = await async_client.get(
            "/api/v1/users/me", headers=auth_headers(response.json()["access_token"])
        )
        assert me.status_code == 200
        assert me.json()["uid"] == test_user["uid"]

    async def test_wrong_password_unauthenticated(
        self, async_client: AsyncClient, test_user: dict
    ):
        response = await async_client.post(
            "/api/v1/auth/login",
            json={"acct": test_user["mail"], "password": "wrong-password"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_credentials"

    async def test_unknown_account_unauthenticated(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/auth/login",
            json={"acct": "nobody@example.com", "password": "whatever"},
        )
        assert response.status_code == 401


class TestTokens:
    """Token handling in the auth gate."""

    async def test_garbage_token_unauthenticated(self, async_client: AsyncClient, auth_headers):
        response = await async_client.get("/api/v1/users/me", headers=auth_headers("garbage"))
        assert response.status_code == 401

    async def test_non_bearer_scheme_unauthenticated(
        self, async_client: AsyncClient, test_user: dict
    ):
        response = await async_client.get(
            "/api/v1/users/me", headers={"Authorization": f"Basic {test_user['token']}"}
        )
        assert response.status_code == 401


class TestLogout:
    """POST /api/v1/auth/logout tests."""

    async def test_logout_returns_204(self, async_client: AsyncClient):
        response = await async_client.post("/api/v1/auth/logout")
        assert response.status_code == 204
