"""
User repository for user-specific database operations.

This module provides database operations for the User model,
including authentication lookups, existence checks and the atomic
updates behind the login lockout bookkeeping.
"""

import uuid
from datetime import UTC, datetime
from typing import NamedTuple

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.user import User, user_roles
from repositories.base import BaseRepository


class LoginFailureState(NamedTuple):
    """Persisted lockout columns after a failed login was recorded."""

    failed_login_attempts: int
    is_locked: bool
    locked_at: datetime | None


class UserRepository(BaseRepository[User]):
    """
    Repository for User model operations.

    Extends BaseRepository with user-specific queries:
    - Email and username lookups (for authentication)
    - Existence checks (for registration)
    - Listing, search and department lookups (account administration)
    - Count queries used by the statistics endpoint
    - Single-statement lockout counter updates
    - Lock status changes used by account administration
    """

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_username(self, username: str) -> User | None:
        """
        Get user by username with roles loaded.

        Example:
            user = await user_repo.get_by_username("jdoe")
            if user is None:
                raise AppException.authentication("Invalid username or password")
        """
        query = (
            select(User)
            .where(User.username == username)
            .options(selectinload(User.roles))
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address (case-insensitive)."""
        query = (
            select(User)
            .where(func.lower(User.email) == email.lower())
            .options(selectinload(User.roles))
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_with_roles(self, user_id: uuid.UUID) -> User | None:
        """Get user by ID with roles eagerly loaded."""
        query = select(User).where(User.id == user_id).options(selectinload(User.roles))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def username_exists(self, username: str) -> bool:
        """
        Check if username is already taken.

        Example:
            if await user_repo.username_exists(data.username):
                raise AppException.conflict("Username is already taken")
        """
        query = select(func.count()).select_from(User).where(User.username == username)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def email_exists(self, email: str) -> bool:
        """Check if email is already registered (case-insensitive)."""
        query = (
            select(func.count())
            .select_from(User)
            .where(func.lower(User.email) == email.lower())
        )
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    # -------------------------------------------------------------------------
    # Administration listings
    # -------------------------------------------------------------------------

    async def list_users(self, offset: int = 0, limit: int = 20) -> tuple[list[User], int]:
        """Page through every account, ordered by username."""
        query = select(User).order_by(User.username.asc())
        return await self._paginate(query, offset, limit)

    async def search(self, keyword: str) -> list[User]:
        """
        Find accounts whose username, full name or email contains keyword.

        Matching is case-insensitive.

        Example:
            users = await user_repo.search("kim")
        """
        pattern = f"%{keyword}%"
        query = (
            select(User)
            .where(
                or_(
                    User.username.ilike(pattern),
                    User.full_name.ilike(pattern),
                    User.email.ilike(pattern),
                )
            )
            .order_by(User.username.asc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_by_department(self, department: str) -> list[User]:
        query = (
            select(User)
            .where(User.department == department)
            .order_by(User.full_name.asc(), User.username.asc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------------

    async def count_active_holders(self, role_id: uuid.UUID) -> int:
        """Count active accounts holding the given role."""
        query = (
            select(func.count())
            .select_from(User)
            .join(user_roles, user_roles.c.user_id == User.id)
            .where(user_roles.c.role_id == role_id, User.is_active.is_(True))
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_active(self) -> int:
        query = select(func.count()).select_from(User).where(User.is_active.is_(True))
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_locked(self) -> int:
        query = select(func.count()).select_from(User).where(User.is_locked.is_(True))
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        """Count accounts with start <= created_at <= end."""
        query = (
            select(func.count())
            .select_from(User)
            .where(User.created_at >= start, User.created_at <= end)
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_by_department(self) -> list[tuple[str | None, int]]:
        """Active account counts grouped by department (NULL included)."""
        query = (
            select(User.department, func.count())
            .where(User.is_active.is_(True))
            .group_by(User.department)
        )
        result = await self.session.execute(query)
        return [(department, count) for department, count in result.all()]

    # -------------------------------------------------------------------------
    # Lockout bookkeeping (single-row atomic updates)
    # -------------------------------------------------------------------------

    async def record_login_failure(
        self, user_id: uuid.UUID, max_attempts: int
    ) -> LoginFailureState:
        """
        Increment the failed-login counter and lock on reaching max_attempts.

        Runs as one UPDATE ... RETURNING so concurrent failures against the
        same account never lose an increment.

        Returns:
            The persisted counter and lock columns after the update
        """
        new_attempts = User.failed_login_attempts + 1
        reaches_threshold = new_attempts >= max_attempts

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                failed_login_attempts=new_attempts,
                is_locked=case((reaches_threshold, True), else_=User.is_locked),
                locked_at=case(
                    (reaches_threshold & User.is_locked.is_(False), func.now()),
                    else_=User.locked_at,
                ),
            )
            .returning(User.failed_login_attempts, User.is_locked, User.locked_at)
            .execution_options(synchronize_session=False)
        )
        row = (await self.session.execute(stmt)).one()
        return LoginFailureState(*row)

    async def record_login_success(self, user_id: uuid.UUID) -> datetime:
        """
        Reset the failed-login counter and stamp last_login_at.

        Returns:
            The login timestamp that was stored
        """
        logged_in_at = datetime.now(UTC)
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(failed_login_attempts=0, last_login_at=logged_in_at)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        return logged_in_at

    async def set_locked(self, user_id: uuid.UUID, locked: bool) -> datetime | None:
        """
        Lock or unlock an account.

        Unlocking also clears the lock timestamp and the failed-login counter.

        Returns:
            The stored locked_at value
        """
        locked_at = datetime.now(UTC) if locked else None
        if locked:
            values = {"is_locked": True, "locked_at": locked_at}
        else:
            values = {"is_locked": False, "locked_at": None, "failed_login_attempts": 0}

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        return locked_at

