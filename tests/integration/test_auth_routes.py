"""
Integration tests for authentication routes.

Services and the database session are replaced through FastAPI dependency
overrides; requests go through the full middleware and exception handler
stack.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from api.dependencies import get_auth_service, get_current_user, get_user_service
from core.exceptions import AppException
from core.security import create_access_token, create_refresh_token
from main import app
from schemas.auth import AccountSummary, LoginResult, RegisterResult
from services.auth_service import REGISTERED_ACTIVE_MESSAGE, AuthService
from services.user_service import UserService


@pytest.fixture
def auth_service_mock() -> AsyncMock:
    service = AsyncMock(spec=AuthService)
    app.dependency_overrides[get_auth_service] = lambda: service
    return service


@pytest.fixture
def user_service_mock() -> AsyncMock:
    service = AsyncMock(spec=UserService)
    app.dependency_overrides[get_user_service] = lambda: service
    return service


def _summary(user) -> AccountSummary:
    return AccountSummary(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        roles=user.role_names,
    )


class TestLogin:
    """POST /api/auth/login"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, auth_service_mock, regular_user):
        auth_service_mock.login.return_value = LoginResult(
            access_token="access",
            refresh_token="refresh",
            expires_in=1800,
            user=_summary(regular_user),
        )

        response = await client.post(
            "/api/auth/login", json={"username": "jdoe", "password": "Password123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert "error_code" not in body
        assert body["data"]["access_token"] == "access"
        assert body["data"]["token_type"] == "bearer"
        assert body["data"]["user"]["roles"] == ["ROLE_USER"]
        auth_service_mock.login.assert_awaited_once_with("jdoe", "Password123")

    @pytest.mark.asyncio
    async def test_login_invalid_credentials(self, client: AsyncClient, auth_service_mock):
        auth_service_mock.login.side_effect = AppException.authentication(
            "Invalid username or password", error_code="INVALID_CREDENTIALS"
        )

        response = await client.post(
            "/api/auth/login", json={"username": "jdoe", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "INVALID_CREDENTIALS"
        assert body["message"] == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_login_missing_field(self, client: AsyncClient, auth_service_mock):
        response = await client.post("/api/auth/login", json={"username": "jdoe"})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert any(error["field"] == "body.password" for error in body["data"])
        auth_service_mock.login.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_login_malformed_json(self, client: AsyncClient, auth_service_mock):
        response = await client.post(
            "/api/auth/login",
            content=b'{"username": "jdoe", ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "MALFORMED_REQUEST"


class TestRegister:
    """POST /api/auth/register"""

    @pytest.mark.asyncio
    async def test_register_created(self, client: AsyncClient, auth_service_mock):
        auth_service_mock.register.return_value = (
            RegisterResult(user_id=uuid.uuid4(), username="newuser", active=True),
            REGISTERED_ACTIVE_MESSAGE,
        )

        response = await client.post(
            "/api/auth/register",
            json={
                "username": "newuser",
                "email": "newuser@example.com",
                "password": "Password123",
                "full_name": "New User",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == REGISTERED_ACTIVE_MESSAGE
        assert body["data"]["active"] is True

    @pytest.mark.asyncio
    async def test_register_weak_password(self, client: AsyncClient, auth_service_mock):
        response = await client.post(
            "/api/auth/register",
            json={
                "username": "newuser",
                "email": "newuser@example.com",
                "password": "abcdefgh",
                "full_name": "New User",
            },
        )

        assert response.status_code == 422
        auth_service_mock.register.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_register_conflict(self, client: AsyncClient, auth_service_mock):
        auth_service_mock.register.side_effect = AppException.conflict("Username is already taken")

        response = await client.post(
            "/api/auth/register",
            json={
                "username": "jdoe",
                "email": "other@example.com",
                "password": "Password123",
                "full_name": "John Doe",
            },
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT"


class TestCurrentUser:
    """Bearer token handling on GET /api/auth/me."""

    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient, override_db):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        body = response.json()
        assert body["error_code"] == "AUTHENTICATION_FAILED"
        assert body["message"] == "Missing authentication credentials"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient, override_db):
        response = await client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_refresh_token_not_accepted_as_access(self, client: AsyncClient, override_db):
        token = create_refresh_token("jdoe")

        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_valid_token_returns_profile(
        self, client: AsyncClient, override_db, regular_user
    ):
        result = MagicMock()
        result.scalar_one_or_none.return_value = regular_user
        override_db.execute.return_value = result
        token = create_access_token({"sub": "jdoe"})

        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "jdoe"
        assert data["roles"] == ["ROLE_USER"]

    @pytest.mark.asyncio
    async def test_locked_account_token_rejected(
        self, client: AsyncClient, override_db, make_user
    ):
        result = MagicMock()
        result.scalar_one_or_none.return_value = make_user("jdoe", is_locked=True)
        override_db.execute.return_value = result
        token = create_access_token({"sub": "jdoe"})

        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error_code"] == "ACCOUNT_LOCKED"

    @pytest.mark.asyncio
    async def test_logout(self, client: AsyncClient, auth_service_mock, regular_user):
        app.dependency_overrides[get_current_user] = lambda: regular_user

        response = await client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out"
        auth_service_mock.logout.assert_called_once_with(regular_user)


class TestAvailability:
    """GET /api/auth/check-username and /check-email"""

    @pytest.mark.asyncio
    async def test_username_available(self, client: AsyncClient, user_service_mock):
        user_service_mock.username_available.return_value = True

        response = await client.get("/api/auth/check-username", params={"username": "fresh"})

        assert response.status_code == 200
        assert response.json()["data"] == {"value": "fresh", "available": True}

    @pytest.mark.asyncio
    async def test_username_too_short(self, client: AsyncClient, user_service_mock):
        response = await client.get("/api/auth/check-username", params={"username": "ab"})

        assert response.status_code == 422
        user_service_mock.username_available.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_email_taken(self, client: AsyncClient, user_service_mock):
        user_service_mock.email_available.return_value = False

        response = await client.get(
            "/api/auth/check-email", params={"email": "jdoe@example.com"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["available"] is False
        assert body["message"] == "Email is already registered"
