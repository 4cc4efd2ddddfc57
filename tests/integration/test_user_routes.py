"""
Integration tests for user administration routes.

The admin check runs for real against a mocked session whose role query
returns ROLE_ADMIN as the highest-priority role.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from api.dependencies import get_current_user, get_role_service, get_user_service
from core.exceptions import AppException
from main import app
from schemas.user import UserStatistics
from services.role_service import RoleService
from services.user_service import UserService

USERS_URL = "/api/v1/users"


@pytest.fixture
def user_service_mock() -> AsyncMock:
    service = AsyncMock(spec=UserService)
    app.dependency_overrides[get_user_service] = lambda: service
    return service


@pytest.fixture
def role_table(override_db, admin_role):
    """Make the highest-priority role lookup return ROLE_ADMIN."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = admin_role
    override_db.execute.return_value = result
    return override_db


def _login_as(user):
    app.dependency_overrides[get_current_user] = lambda: user


class TestAdminGate:
    @pytest.mark.asyncio
    async def test_regular_user_forbidden(
        self, client: AsyncClient, user_service_mock, role_table, regular_user
    ):
        _login_as(regular_user)

        response = await client.get(f"{USERS_URL}/{uuid.uuid4()}")

        assert response.status_code == 403
        body = response.json()
        assert body["error_code"] == "FORBIDDEN"
        assert body["message"] == "Administrator privileges required"
        user_service_mock.get_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_gets_user(
        self, client: AsyncClient, user_service_mock, role_table, admin_user, regular_user
    ):
        _login_as(admin_user)
        user_service_mock.get_user.return_value = regular_user

        response = await client.get(f"{USERS_URL}/{regular_user.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "jdoe"
        assert data["roles"] == ["ROLE_USER"]
        assert data["failed_login_attempts"] == 0
        assert "password_hash" not in data


class TestAccountStatus:
    @pytest.mark.asyncio
    async def test_unlock(
        self, client: AsyncClient, user_service_mock, role_table, admin_user, regular_user
    ):
        _login_as(admin_user)
        user_service_mock.unlock_user.return_value = regular_user

        response = await client.post(f"{USERS_URL}/{regular_user.id}/unlock")

        assert response.status_code == 200
        assert response.json()["message"] == "Account unlocked"
        user_service_mock.unlock_user.assert_awaited_once_with(regular_user.id, admin_user)

    @pytest.mark.asyncio
    async def test_lock(
        self, client: AsyncClient, user_service_mock, role_table, admin_user, make_user
    ):
        _login_as(admin_user)
        locked = make_user("jdoe", is_locked=True)
        user_service_mock.lock_user.return_value = locked

        response = await client.post(f"{USERS_URL}/{locked.id}/lock")

        assert response.status_code == 200
        assert response.json()["data"]["is_locked"] is True

    @pytest.mark.asyncio
    async def test_activate(
        self, client: AsyncClient, user_service_mock, role_table, admin_user, regular_user
    ):
        _login_as(admin_user)
        user_service_mock.set_active.return_value = regular_user

        response = await client.post(f"{USERS_URL}/{regular_user.id}/activate")

        assert response.status_code == 200
        user_service_mock.set_active.assert_awaited_once_with(regular_user.id, True, admin_user)

    @pytest.mark.asyncio
    async def test_self_deactivation_conflict(
        self, client: AsyncClient, user_service_mock, role_table, admin_user
    ):
        _login_as(admin_user)
        user_service_mock.set_active.side_effect = AppException.conflict(
            "You cannot deactivate your own account"
        )

        response = await client.post(f"{USERS_URL}/{admin_user.id}/deactivate")

        assert response.status_code == 409
        assert response.json()["message"] == "You cannot deactivate your own account"


class TestListings:
    @pytest.mark.asyncio
    async def test_list_users(
        self, client: AsyncClient, user_service_mock, role_table, admin_user, regular_user
    ):
        _login_as(admin_user)
        user_service_mock.list_users.return_value = ([admin_user, regular_user], 7)

        response = await client.get(USERS_URL, params={"page": 1, "page_size": 2})

        assert response.status_code == 200
        page = response.json()["data"]
        assert [item["username"] for item in page["data"]] == ["admin", "jdoe"]
        assert page["meta"] == {"total": 7, "page": 1, "page_size": 2, "total_pages": 4}
        pagination = user_service_mock.list_users.await_args.args[0]
        assert (pagination.page, pagination.offset) == (1, 0)

    @pytest.mark.asyncio
    async def test_list_users_requires_admin(
        self, client: AsyncClient, user_service_mock, role_table, regular_user
    ):
        _login_as(regular_user)

        response = await client.get(USERS_URL)

        assert response.status_code == 403
        user_service_mock.list_users.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search(
        self, client: AsyncClient, user_service_mock, role_table, admin_user, regular_user
    ):
        _login_as(admin_user)
        user_service_mock.search_users.return_value = [regular_user]

        response = await client.get(f"{USERS_URL}/search", params={"keyword": "jd"})

        assert response.status_code == 200
        assert response.json()["data"][0]["username"] == "jdoe"
        user_service_mock.search_users.assert_awaited_once_with("jd")

    @pytest.mark.asyncio
    async def test_search_requires_keyword(
        self, client: AsyncClient, user_service_mock, role_table, admin_user
    ):
        _login_as(admin_user)

        response = await client.get(f"{USERS_URL}/search", params={"keyword": ""})

        assert response.status_code == 422
        user_service_mock.search_users.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_department(
        self, client: AsyncClient, user_service_mock, role_table, admin_user, regular_user
    ):
        _login_as(admin_user)
        user_service_mock.list_by_department.return_value = [regular_user]

        response = await client.get(f"{USERS_URL}/department/Engineering")

        assert response.status_code == 200
        assert response.json()["data"][0]["department"] == "Engineering"
        user_service_mock.list_by_department.assert_awaited_once_with("Engineering")

    @pytest.mark.asyncio
    async def test_statistics(
        self, client: AsyncClient, user_service_mock, role_table, admin_user
    ):
        _login_as(admin_user)
        user_service_mock.get_statistics.return_value = UserStatistics(
            total_users=10,
            active_users=8,
            inactive_users=2,
            locked_users=1,
            new_users_this_week=3,
            department_stats={"Engineering": 5, "unassigned": 3},
        )

        response = await client.get(f"{USERS_URL}/statistics")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["inactive_users"] == 2
        assert data["department_stats"]["unassigned"] == 3


class TestProfileAndRoles:
    @pytest.mark.asyncio
    async def test_user_updates_own_profile(
        self, client: AsyncClient, user_service_mock, regular_user
    ):
        _login_as(regular_user)
        user_service_mock.update_user.return_value = regular_user

        response = await client.put(
            f"{USERS_URL}/{regular_user.id}", json={"position": "Engineer"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Profile updated"
        user_id, data, caller = user_service_mock.update_user.await_args.args
        assert user_id == regular_user.id
        assert data.model_dump(exclude_unset=True) == {"position": "Engineer"}
        assert caller is regular_user

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(
        self, client: AsyncClient, user_service_mock, regular_user
    ):
        _login_as(regular_user)

        response = await client.put(
            f"{USERS_URL}/{regular_user.id}", json={"email": "not-an-email"}
        )

        assert response.status_code == 422
        user_service_mock.update_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_roles(
        self,
        client: AsyncClient,
        user_service_mock,
        role_table,
        admin_user,
        make_user,
        admin_role,
    ):
        _login_as(admin_user)
        promoted = make_user("jdoe", roles=[admin_role])
        user_service_mock.update_user_roles.return_value = promoted

        response = await client.put(
            f"{USERS_URL}/{promoted.id}/roles", json={"role_ids": [str(admin_role.id)]}
        )

        assert response.status_code == 200
        assert response.json()["data"]["roles"] == ["ROLE_ADMIN"]
        user_service_mock.update_user_roles.assert_awaited_once_with(
            promoted.id, [admin_role.id], admin_user
        )

    @pytest.mark.asyncio
    async def test_update_roles_requires_at_least_one(
        self, client: AsyncClient, user_service_mock, role_table, admin_user
    ):
        _login_as(admin_user)

        response = await client.put(f"{USERS_URL}/{uuid.uuid4()}/roles", json={"role_ids": []})

        assert response.status_code == 422
        user_service_mock.update_user_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_removing_last_admin_conflicts(
        self, client: AsyncClient, user_service_mock, role_table, admin_user, user_role
    ):
        _login_as(admin_user)
        user_service_mock.update_user_roles.side_effect = AppException.conflict(
            "At least one active account must keep ROLE_ADMIN"
        )

        response = await client.put(
            f"{USERS_URL}/{admin_user.id}/roles", json={"role_ids": [str(user_role.id)]}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT"


class TestRoles:
    """GET /api/v1/roles"""

    @pytest.fixture
    def role_service_mock(self) -> AsyncMock:
        service = AsyncMock(spec=RoleService)
        app.dependency_overrides[get_role_service] = lambda: service
        return service

    @pytest.mark.asyncio
    async def test_list_roles(
        self, client: AsyncClient, role_service_mock, role_table, admin_user, admin_role, user_role
    ):
        _login_as(admin_user)
        role_service_mock.list_roles.return_value = [admin_role, user_role]

        response = await client.get("/api/v1/roles")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [role["name"] for role in data] == ["ROLE_ADMIN", "ROLE_USER"]
        assert data[0]["priority"] == 1
        assert data[0]["id"] == str(admin_role.id)

    @pytest.mark.asyncio
    async def test_list_roles_requires_admin(
        self, client: AsyncClient, role_service_mock, role_table, regular_user
    ):
        _login_as(regular_user)

        response = await client.get("/api/v1/roles")

        assert response.status_code == 403
        role_service_mock.list_roles.assert_not_awaited()
