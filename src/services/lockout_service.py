"""
Account lockout state machine.

States:
    Active  - may authenticate
    Locked  - too many consecutive failed logins; only an admin unlock clears it
    Inactive (orthogonal) - pending approval or disabled; checked first

Transitions on an authentication attempt:
    inactive            -> reject, nothing written
    locked              -> reject, nothing written
    password matches    -> counter reset to 0, last_login_at stamped
    password mismatch   -> counter + 1; reaching the threshold locks the account
                           in the same UPDATE statement

The threshold comes from settings.max_failed_login_attempts.
"""

import enum
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from core.config import settings
from core.exceptions import AppException
from core.security import verify_password
from models.user import User
from repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
ACCOUNT_DISABLED_MESSAGE = "Account is disabled. Contact an administrator."
ACCOUNT_LOCKED_MESSAGE = "Account is locked. Contact an administrator."


def locked_now_message(attempts: int) -> str:
    return (
        f"Account locked after {attempts} failed login attempts. "
        "Contact an administrator."
    )


class LoginAttemptOutcome(str, enum.Enum):
    """Result of comparing a candidate password for an active, unlocked account."""

    SUCCESS = "success"
    MISMATCH = "mismatch"
    LOCKED_NOW = "locked_now"


def _mirror(user: User, **values: Any) -> None:
    # Reflect values already written by an UPDATE without marking the row dirty
    for key, value in values.items():
        set_committed_value(user, key, value)


class AccountLockoutService:
    """
    Tracks failed logins per account and locks on the configured threshold.

    Every state change is a single-row UPDATE issued through UserRepository;
    the loaded User instance is kept in sync with what was written.
    """

    def __init__(self, session: AsyncSession, max_attempts: int | None = None):
        self.session = session
        self.user_repo = UserRepository(session)
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.max_failed_login_attempts
        )

    def ensure_can_authenticate(self, user: User) -> None:
        """
        Reject disabled or locked accounts before any password comparison.

        Raises:
            AppException: AUTHENTICATION kind, with ACCOUNT_DISABLED or
                ACCOUNT_LOCKED error code
        """
        if not user.is_active:
            logger.warning(f"Authentication refused for disabled account: {user.username}")
            raise AppException.authentication(
                ACCOUNT_DISABLED_MESSAGE, error_code="ACCOUNT_DISABLED"
            )

        if user.is_locked:
            logger.warning(f"Authentication refused for locked account: {user.username}")
            raise AppException.authentication(
                ACCOUNT_LOCKED_MESSAGE, error_code="ACCOUNT_LOCKED"
            )

    async def register_attempt(self, user: User, password: str) -> LoginAttemptOutcome:
        """
        Run one authentication attempt through the state machine.

        Status checks run first and raise without writing anything. The
        password comparison then always results in exactly one UPDATE.

        Args:
            user: Account being authenticated
            password: Candidate plain text password

        Returns:
            SUCCESS, MISMATCH, or LOCKED_NOW when this attempt reached the threshold
        """
        self.ensure_can_authenticate(user)

        if verify_password(password, user.password_hash):
            logged_in_at = await self.user_repo.record_login_success(user.id)
            _mirror(user, failed_login_attempts=0, last_login_at=logged_in_at)
            logger.info(f"Successful login: {user.username}")
            return LoginAttemptOutcome.SUCCESS

        state = await self.user_repo.record_login_failure(user.id, self.max_attempts)
        _mirror(
            user,
            failed_login_attempts=state.failed_login_attempts,
            is_locked=state.is_locked,
            locked_at=state.locked_at,
        )

        if state.is_locked:
            logger.warning(
                f"Account locked after {state.failed_login_attempts} failed attempts: "
                f"{user.username}"
            )
            return LoginAttemptOutcome.LOCKED_NOW

        logger.warning(
            f"Failed login for {user.username} "
            f"({state.failed_login_attempts}/{self.max_attempts})"
        )
        return LoginAttemptOutcome.MISMATCH

    async def lock(self, user: User) -> None:
        """Administratively lock an account."""
        locked_at = await self.user_repo.set_locked(user.id, True)
        _mirror(user, is_locked=True, locked_at=locked_at)
        logger.info(f"Account locked by administrator: {user.username}")

    async def unlock(self, user: User) -> None:
        """Clear the lock and the failed-login counter."""
        await self.user_repo.set_locked(user.id, False)
        _mirror(user, is_locked=False, locked_at=None, failed_login_attempts=0)
        logger.info(f"Account unlocked: {user.username}")
