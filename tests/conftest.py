"""
Pytest configuration and fixtures for KM Portal tests.

This module provides:
- Environment defaults (set before anything from src is imported)
- Model factories for users, roles and boards
- A mocked AsyncSession
- An HTTP client bound to the ASGI app with dependency overrides
"""

# Set environment variables BEFORE importing anything from src
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-km-portal-at-least-32-chars")
os.environ.setdefault("DATABASE_URL", "postgresql+asyncpg://km:km@localhost:5432/km_portal_test")
os.environ["ENVIRONMENT"] = "development"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "8192"
os.environ["ARGON2_PARALLELISM"] = "1"

import uuid
from datetime import UTC, datetime
from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from core.database import get_db
from core.security import hash_password
from main import app
from models.board import Board
from models.user import Role, User

TEST_PASSWORD = "Password123"


# ============================================================================
# Model Factories
# ============================================================================
@pytest.fixture
def admin_role() -> Role:
    return Role(
        id=uuid.uuid4(),
        name="ROLE_ADMIN",
        display_name="Administrator",
        priority=1,
    )


@pytest.fixture
def user_role() -> Role:
    return Role(
        id=uuid.uuid4(),
        name="ROLE_USER",
        display_name="User",
        priority=100,
    )


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Argon2id hash of TEST_PASSWORD (computed once per session)."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def make_user(user_role: Role, password_hash: str) -> Callable[..., User]:
    """Factory building detached User instances with sensible defaults."""

    def _make_user(username: str = "jdoe", **overrides) -> User:
        now = datetime.now(UTC)
        values = {
            "id": uuid.uuid4(),
            "username": username,
            "email": f"{username}@example.com",
            "password_hash": password_hash,
            "full_name": username.title(),
            "department": "Engineering",
            "position": None,
            "phone_number": None,
            "is_active": True,
            "is_locked": False,
            "locked_at": None,
            "failed_login_attempts": 0,
            "password_expired": False,
            "last_login_at": None,
            "roles": [user_role],
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return User(**values)

    return _make_user


@pytest.fixture
def regular_user(make_user) -> User:
    return make_user("jdoe")


@pytest.fixture
def admin_user(make_user, admin_role: Role) -> User:
    return make_user("admin", full_name="Portal Admin", roles=[admin_role])


@pytest.fixture
def make_board() -> Callable[..., Board]:
    """Factory building detached Board instances."""

    def _make_board(author: User, **overrides) -> Board:
        now = datetime.now(UTC)
        values = {
            "id": uuid.uuid4(),
            "title": "Weekly notes",
            "content": "<p>Notes</p>",
            "category": "FREE",
            "author_id": author.id,
            "author": author,
            "view_count": 0,
            "is_pinned": False,
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        }
        values.update(overrides)
        return Board(**values)

    return _make_board


# ============================================================================
# Session / Client Fixtures
# ============================================================================
@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock AsyncSession."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def override_db(mock_session: AsyncMock) -> AsyncMock:
    """Serve mock_session wherever a route depends on get_db."""

    async def _get_db():
        yield mock_session

    app.dependency_overrides[get_db] = _get_db
    return mock_session


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client bound to the app.

    Tests register their own dependency overrides; they are cleared afterwards.
    Unhandled server errors are returned as responses instead of re-raised.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
