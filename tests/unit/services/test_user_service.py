"""
Unit tests for UserService and PermissionService.

All tests are fully mocked - no database or external dependencies.
"""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from core.exceptions import AppException, ErrorKind
from schemas.common import PaginationParams
from schemas.user import UserUpdate
from services.permission_service import PermissionService
from services.role_service import RoleService
from services.user_service import UNASSIGNED_DEPARTMENT_LABEL, UserService


@pytest.fixture
def mock_user_repo():
    repo = AsyncMock()

    async def echo(user):
        return user

    repo.update.side_effect = echo
    repo.set_locked.return_value = None
    return repo


@pytest.fixture
def mock_role_repo(admin_role, user_role):
    repo = AsyncMock()
    repo.get_highest_priority_role.return_value = admin_role
    repo.get_by_ids.return_value = [user_role]
    return repo


@pytest.fixture
def user_service(mock_session, mock_user_repo, mock_role_repo):
    """Create UserService with mocked dependencies."""
    with (
        patch("services.user_service.UserRepository", return_value=mock_user_repo),
        patch("services.lockout_service.UserRepository", return_value=mock_user_repo),
        patch("services.user_service.RoleRepository", return_value=mock_role_repo),
        patch("services.permission_service.RoleRepository", return_value=mock_role_repo),
    ):
        return UserService(mock_session)


class TestGetUser:
    @pytest.mark.asyncio
    async def test_get_user(self, user_service, mock_user_repo, regular_user):
        mock_user_repo.get_with_roles.return_value = regular_user

        assert await user_service.get_user(regular_user.id) is regular_user

    @pytest.mark.asyncio
    async def test_get_missing_user(self, user_service, mock_user_repo):
        mock_user_repo.get_with_roles.return_value = None

        with pytest.raises(AppException) as exc_info:
            await user_service.get_user(uuid.uuid4())

        assert exc_info.value.kind is ErrorKind.NOT_FOUND


class TestLocking:
    @pytest.mark.asyncio
    async def test_lock_user(
        self, user_service, mock_user_repo, mock_session, regular_user, admin_user
    ):
        mock_user_repo.get_with_roles.return_value = regular_user

        user = await user_service.lock_user(regular_user.id, admin_user)

        assert user.is_locked is True
        mock_user_repo.set_locked.assert_awaited_once_with(regular_user.id, True)
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unlock_user(self, user_service, mock_user_repo, make_user, admin_user):
        locked = make_user("locked", is_locked=True, failed_login_attempts=5)
        mock_user_repo.get_with_roles.return_value = locked

        user = await user_service.unlock_user(locked.id, admin_user)

        assert user.is_locked is False
        assert user.failed_login_attempts == 0


class TestActivation:
    @pytest.mark.asyncio
    async def test_activate_pending_account(
        self, user_service, mock_user_repo, mock_session, make_user, admin_user
    ):
        pending = make_user("pending", is_active=False)
        mock_user_repo.get_with_roles.return_value = pending

        user = await user_service.set_active(pending.id, True, admin_user)

        assert user.is_active is True
        mock_user_repo.update.assert_awaited_once_with(pending)
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_admin_cannot_deactivate_self(self, user_service, mock_user_repo, admin_user):
        mock_user_repo.get_with_roles.return_value = admin_user

        with pytest.raises(AppException) as exc_info:
            await user_service.set_active(admin_user.id, False, admin_user)

        assert exc_info.value.kind is ErrorKind.CONFLICT
        assert admin_user.is_active is True
        mock_user_repo.update.assert_not_awaited()


class TestAvailability:
    @pytest.mark.asyncio
    async def test_username_available(self, user_service, mock_user_repo):
        mock_user_repo.username_exists.return_value = False
        assert await user_service.username_available("fresh") is True

    @pytest.mark.asyncio
    async def test_email_taken(self, user_service, mock_user_repo):
        mock_user_repo.email_exists.return_value = True
        assert await user_service.email_available("jdoe@example.com") is False


class TestListings:
    @pytest.mark.asyncio
    async def test_list_users_pages(self, user_service, mock_user_repo, regular_user):
        mock_user_repo.list_users.return_value = ([regular_user], 11)

        users, total = await user_service.list_users(PaginationParams(page=2, page_size=5))

        assert users == [regular_user]
        assert total == 11
        mock_user_repo.list_users.assert_awaited_once_with(offset=5, limit=5)

    @pytest.mark.asyncio
    async def test_search_trims_keyword(self, user_service, mock_user_repo, regular_user):
        mock_user_repo.search.return_value = [regular_user]

        assert await user_service.search_users("  jdoe ") == [regular_user]
        mock_user_repo.search.assert_awaited_once_with("jdoe")

    @pytest.mark.asyncio
    async def test_blank_search_keyword_rejected(self, user_service, mock_user_repo):
        with pytest.raises(AppException) as exc_info:
            await user_service.search_users("   ")

        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.data == [
            {"field": "keyword", "message": "Search keyword is required"}
        ]
        mock_user_repo.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_by_department(self, user_service, mock_user_repo, regular_user):
        mock_user_repo.list_by_department.return_value = [regular_user]

        assert await user_service.list_by_department("Engineering") == [regular_user]
        mock_user_repo.list_by_department.assert_awaited_once_with("Engineering")


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_user_updates_own_profile(
        self, user_service, mock_user_repo, mock_role_repo, mock_session, regular_user
    ):
        mock_user_repo.get_with_roles.return_value = regular_user

        user = await user_service.update_user(
            regular_user.id,
            UserUpdate(full_name="  John Doe ", position="Engineer"),
            regular_user,
        )

        assert user.full_name == "John Doe"
        assert user.position == "Engineer"
        assert user.department == "Engineering"
        mock_role_repo.get_highest_priority_role.assert_not_awaited()
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_user_forbidden(
        self, user_service, mock_user_repo, make_user, regular_user
    ):
        other = make_user("other")

        with pytest.raises(AppException) as exc_info:
            await user_service.update_user(other.id, UserUpdate(position="x"), regular_user)

        assert exc_info.value.kind is ErrorKind.AUTHORIZATION
        mock_user_repo.get_with_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_updates_any_profile(
        self, user_service, mock_user_repo, regular_user, admin_user
    ):
        mock_user_repo.get_with_roles.return_value = regular_user

        user = await user_service.update_user(
            regular_user.id, UserUpdate(department="Sales"), admin_user
        )

        assert user.department == "Sales"

    @pytest.mark.asyncio
    async def test_email_taken_by_another_account(
        self, user_service, mock_user_repo, mock_session, make_user, regular_user
    ):
        mock_user_repo.get_with_roles.return_value = regular_user
        mock_user_repo.get_by_email.return_value = make_user("other")

        with pytest.raises(AppException) as exc_info:
            await user_service.update_user(
                regular_user.id, UserUpdate(email="other@example.com"), regular_user
            )

        assert exc_info.value.kind is ErrorKind.CONFLICT
        assert regular_user.email == "jdoe@example.com"
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_email_in_other_case_is_not_a_conflict(
        self, user_service, mock_user_repo, regular_user
    ):
        mock_user_repo.get_with_roles.return_value = regular_user

        await user_service.update_user(
            regular_user.id, UserUpdate(email="JDoe@example.com"), regular_user
        )

        mock_user_repo.get_by_email.assert_not_awaited()


class TestUpdateRoles:
    @pytest.mark.asyncio
    async def test_assigns_requested_roles(
        self,
        user_service,
        mock_user_repo,
        mock_role_repo,
        mock_session,
        regular_user,
        admin_user,
        admin_role,
        user_role,
    ):
        mock_user_repo.get_with_roles.return_value = regular_user
        mock_role_repo.get_by_ids.return_value = [admin_role, user_role]

        user = await user_service.update_user_roles(
            regular_user.id, [user_role.id, admin_role.id, user_role.id], admin_user
        )

        assert user.role_names == ["ROLE_ADMIN", "ROLE_USER"]
        mock_role_repo.get_by_ids.assert_awaited_once_with([user_role.id, admin_role.id])
        mock_user_repo.count_active_holders.assert_not_awaited()
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_role_list_rejected(self, user_service, mock_user_repo, admin_user):
        with pytest.raises(AppException) as exc_info:
            await user_service.update_user_roles(uuid.uuid4(), [], admin_user)

        assert exc_info.value.kind is ErrorKind.VALIDATION
        mock_user_repo.get_with_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(
        self, user_service, mock_user_repo, mock_session, regular_user, admin_user, user_role
    ):
        mock_user_repo.get_with_roles.return_value = regular_user
        unknown = uuid.uuid4()

        with pytest.raises(AppException) as exc_info:
            await user_service.update_user_roles(
                regular_user.id, [user_role.id, unknown], admin_user
            )

        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert str(unknown) in exc_info.value.message
        assert exc_info.value.data[0]["field"] == "role_ids"
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_last_admin_keeps_admin_role(
        self, user_service, mock_user_repo, mock_session, admin_user, admin_role, user_role
    ):
        mock_user_repo.get_with_roles.return_value = admin_user
        mock_user_repo.count_active_holders.return_value = 1

        with pytest.raises(AppException) as exc_info:
            await user_service.update_user_roles(admin_user.id, [user_role.id], admin_user)

        assert exc_info.value.kind is ErrorKind.CONFLICT
        assert admin_user.role_names == ["ROLE_ADMIN"]
        mock_user_repo.count_active_holders.assert_awaited_once_with(admin_role.id)
        mock_user_repo.update.assert_not_awaited()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_role_removable_while_another_admin_remains(
        self, user_service, mock_user_repo, make_user, admin_user, admin_role, user_role
    ):
        second_admin = make_user("second", roles=[admin_role])
        mock_user_repo.get_with_roles.return_value = second_admin
        mock_user_repo.count_active_holders.return_value = 2

        user = await user_service.update_user_roles(second_admin.id, [user_role.id], admin_user)

        assert user.role_names == ["ROLE_USER"]

    @pytest.mark.asyncio
    async def test_inactive_admin_may_lose_admin_role(
        self, user_service, mock_user_repo, make_user, admin_user, admin_role, user_role
    ):
        dormant = make_user("dormant", roles=[admin_role], is_active=False)
        mock_user_repo.get_with_roles.return_value = dormant

        user = await user_service.update_user_roles(dormant.id, [user_role.id], admin_user)

        assert user.role_names == ["ROLE_USER"]
        mock_user_repo.count_active_holders.assert_not_awaited()


class TestStatistics:
    @pytest.mark.asyncio
    async def test_statistics(self, user_service, mock_user_repo):
        now = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
        mock_user_repo.count.return_value = 40
        mock_user_repo.count_active.return_value = 35
        mock_user_repo.count_locked.return_value = 2
        mock_user_repo.count_created_between.return_value = 4
        mock_user_repo.count_by_department.return_value = [("Engineering", 20), (None, 15)]

        stats = await user_service.get_statistics(now=now)

        assert stats.total_users == 40
        assert stats.active_users == 35
        assert stats.inactive_users == 5
        assert stats.locked_users == 2
        assert stats.new_users_this_week == 4
        assert stats.department_stats == {"Engineering": 20, UNASSIGNED_DEPARTMENT_LABEL: 15}
        mock_user_repo.count_created_between.assert_awaited_once_with(
            now - timedelta(days=7), now
        )


class TestRoleService:
    @pytest.mark.asyncio
    async def test_list_roles(self, mock_session, admin_role, user_role):
        repo = AsyncMock()
        repo.list_all.return_value = [admin_role, user_role]
        with patch("services.role_service.RoleRepository", return_value=repo):
            service = RoleService(mock_session)

        assert await service.list_roles() == [admin_role, user_role]


class TestPermissionService:
    """Privilege follows the highest-priority role."""

    @pytest.fixture
    def mock_role_repo(self, admin_role):
        repo = AsyncMock()
        repo.get_highest_priority_role.return_value = admin_role
        return repo

    @pytest.fixture
    def permissions(self, mock_session, mock_role_repo):
        with patch("services.permission_service.RoleRepository", return_value=mock_role_repo):
            return PermissionService(mock_session)

    @pytest.mark.asyncio
    async def test_admin_is_privileged(self, permissions, admin_user):
        assert await permissions.is_privileged(admin_user) is True

    @pytest.mark.asyncio
    async def test_regular_user_is_not(self, permissions, regular_user):
        assert await permissions.is_privileged(regular_user) is False

    @pytest.mark.asyncio
    async def test_no_roles_configured(self, permissions, mock_role_repo, admin_user):
        mock_role_repo.get_highest_priority_role.return_value = None
        assert await permissions.is_privileged(admin_user) is False

    @pytest.mark.asyncio
    async def test_author_can_modify_own_board(
        self, permissions, mock_role_repo, regular_user, make_board
    ):
        board = make_board(regular_user)

        assert await permissions.can_modify_board(regular_user, board) is True
        mock_role_repo.get_highest_priority_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_require_privileged_raises(self, permissions, regular_user):
        with pytest.raises(AppException) as exc_info:
            await permissions.require_privileged(regular_user, "Administrators only")

        assert exc_info.value.kind is ErrorKind.AUTHORIZATION
        assert exc_info.value.message == "Administrators only"
