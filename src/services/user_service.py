"""
User management service for account administration.

This module provides:
- Get, list, search and per-department listings (admin only)
- Profile updates (the account itself or an admin)
- Role assignment that always leaves an active administrator (admin only)
- Lock / unlock accounts (admin only)
- Activate (approve) / deactivate accounts (admin only)
- User statistics (admin only)
- Username and email availability checks (public)
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AppException
from models.user import User
from repositories.role_repository import RoleRepository
from repositories.user_repository import UserRepository
from schemas.common import PaginationParams
from schemas.user import UserStatistics, UserUpdate
from services.lockout_service import AccountLockoutService
from services.permission_service import PermissionService

logger = logging.getLogger(__name__)


UNASSIGNED_DEPARTMENT_LABEL = "unassigned"
STATISTICS_WEEK_DAYS = 7


class UserService:
    """
    Service class for user management operations.

    Admin-only access is enforced by the route dependencies, so most of
    these methods take the acting admin only for logging. Profile updates
    are the exception: the account itself may call them too, so the check
    happens here.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.lockout = AccountLockoutService(session)
        self.permissions = PermissionService(session)

    async def get_user(self, user_id: uuid.UUID) -> User:
        """
        Get a user by ID with roles loaded.

        Raises:
            AppException: NOT_FOUND kind if the user does not exist
        """
        user = await self.user_repo.get_with_roles(user_id)
        if user is None:
            raise AppException.not_found("User")
        return user

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    async def list_users(self, pagination: PaginationParams) -> tuple[list[User], int]:
        return await self.user_repo.list_users(
            offset=pagination.offset, limit=pagination.page_size
        )

    async def search_users(self, keyword: str) -> list[User]:
        """
        Search accounts by username, full name or email.

        Raises:
            AppException: VALIDATION kind naming "keyword" if it is blank
        """
        keyword = keyword.strip()
        if not keyword:
            raise AppException.validation("Search keyword is required", field="keyword")
        return await self.user_repo.search(keyword)

    async def list_by_department(self, department: str) -> list[User]:
        return await self.user_repo.list_by_department(department)

    # -------------------------------------------------------------------------
    # Profile and roles
    # -------------------------------------------------------------------------

    async def update_user(
        self, user_id: uuid.UUID, data: UserUpdate, current_user: User
    ) -> User:
        """
        Update profile fields of an account.

        Users may update their own profile; admins may update anyone's.
        Only the fields present in the request are changed.

        Raises:
            AppException: AUTHORIZATION, NOT_FOUND, or CONFLICT when the new
                email belongs to another account
        """
        if user_id != current_user.id and not await self.permissions.is_privileged(
            current_user
        ):
            logger.warning(
                f"User {current_user.username} attempted to update profile {user_id}"
            )
            raise AppException.authorization(
                "You do not have permission to update this user's profile"
            )

        user = await self.get_user(user_id)

        if data.email is not None and data.email.lower() != user.email.lower():
            existing = await self.user_repo.get_by_email(data.email)
            if existing is not None and existing.id != user.id:
                logger.warning(f"Email {data.email} already in use by user {existing.id}")
                raise AppException.conflict("Email is already registered")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)

        user = await self.user_repo.update(user)
        await self.session.commit()

        logger.info(f"User {user.username} profile updated by {current_user.username}")
        return user

    async def update_user_roles(
        self, user_id: uuid.UUID, role_ids: list[uuid.UUID], admin: User
    ) -> User:
        """
        Replace the roles held by an account.

        The administrator role (highest priority) cannot be taken away from
        the last active account holding it.

        Raises:
            AppException: NOT_FOUND; VALIDATION naming "role_ids" when the
                list is empty or names unknown roles; CONFLICT when the
                change would leave no active administrator
        """
        requested = list(dict.fromkeys(role_ids))
        if not requested:
            raise AppException.validation("At least one role is required", field="role_ids")

        user = await self.get_user(user_id)

        roles = await self.role_repo.get_by_ids(requested)
        missing = set(requested) - {role.id for role in roles}
        if missing:
            unknown = ", ".join(sorted(str(role_id) for role_id in missing))
            raise AppException.validation(f"Unknown role IDs: {unknown}", field="role_ids")

        top_role = await self.role_repo.get_highest_priority_role()
        if (
            top_role is not None
            and user.is_active
            and user.has_role(top_role.name)
            and top_role.id not in requested
            and await self.user_repo.count_active_holders(top_role.id) <= 1
        ):
            logger.warning(
                f"Refused to remove {top_role.name} from {user.username}: "
                f"last active holder"
            )
            raise AppException.conflict(
                f"At least one active account must keep {top_role.name}"
            )

        user.roles = roles
        user = await self.user_repo.update(user)
        await self.session.commit()

        logger.info(
            f"Roles of {user.username} set to {user.role_names} by {admin.username}"
        )
        return user

    # -------------------------------------------------------------------------
    # Account status
    # -------------------------------------------------------------------------

    async def lock_user(self, user_id: uuid.UUID, admin: User) -> User:
        user = await self.get_user(user_id)
        await self.lockout.lock(user)
        await self.session.commit()
        logger.info(f"User {user.username} locked by {admin.username}")
        return user

    async def unlock_user(self, user_id: uuid.UUID, admin: User) -> User:
        """Clear the lock and failed-login counter so the user can log in again."""
        user = await self.get_user(user_id)
        await self.lockout.unlock(user)
        await self.session.commit()
        logger.info(f"User {user.username} unlocked by {admin.username}")
        return user

    async def set_active(self, user_id: uuid.UUID, active: bool, admin: User) -> User:
        """
        Activate or deactivate an account.

        Activation is how pending registrations get approved. An admin
        cannot deactivate their own account.

        Raises:
            AppException: NOT_FOUND, or CONFLICT on self-deactivation
        """
        user = await self.get_user(user_id)
        if not active and user.id == admin.id:
            raise AppException.conflict("You cannot deactivate your own account")

        user.is_active = active
        user = await self.user_repo.update(user)
        await self.session.commit()

        logger.info(
            f"User {user.username} {'activated' if active else 'deactivated'} "
            f"by {admin.username}"
        )
        return user

    # -------------------------------------------------------------------------
    # Statistics and availability
    # -------------------------------------------------------------------------

    async def get_statistics(self, now: datetime | None = None) -> UserStatistics:
        """Aggregate account figures; "this week" is the last seven days up to now."""
        now = now or datetime.now(UTC)

        total = await self.user_repo.count()
        active = await self.user_repo.count_active()
        locked = await self.user_repo.count_locked()
        new_this_week = await self.user_repo.count_created_between(
            now - timedelta(days=STATISTICS_WEEK_DAYS), now
        )

        department_stats: dict[str, int] = {}
        for department, count in await self.user_repo.count_by_department():
            label = department if department is not None else UNASSIGNED_DEPARTMENT_LABEL
            department_stats[label] = department_stats.get(label, 0) + count

        return UserStatistics(
            total_users=total,
            active_users=active,
            inactive_users=total - active,
            locked_users=locked,
            new_users_this_week=new_this_week,
            department_stats=department_stats,
        )

    async def username_available(self, username: str) -> bool:
        return not await self.user_repo.username_exists(username)

    async def email_available(self, email: str) -> bool:
        return not await self.user_repo.email_exists(email)
