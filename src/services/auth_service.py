"""
Authentication service for login, registration and token management.

This module provides:
- Login through the account lockout state machine, with JWT issuance
- Access token refresh from a refresh token
- Registration with uniqueness checks and environment-dependent activation
- Current profile lookup and logout acknowledgement
"""

import logging

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import AppException
from core.security import (
    TOKEN_TYPE_REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_token_type,
)
from models.user import User
from repositories.role_repository import RoleRepository
from repositories.user_repository import UserRepository
from schemas.auth import (
    AccountSummary,
    LoginResult,
    RegisterRequest,
    RegisterResult,
    TokenRefreshResult,
)
from services.lockout_service import (
    INVALID_CREDENTIALS_MESSAGE,
    AccountLockoutService,
    LoginAttemptOutcome,
    locked_now_message,
)

logger = logging.getLogger(__name__)


REGISTERED_ACTIVE_MESSAGE = "Registration complete. You can log in now."
REGISTERED_PENDING_MESSAGE = (
    "Registration complete. Your account is pending administrator approval."
)


class AuthService:
    """
    Service class for authentication operations.

    This service handles:
    - Login and token generation
    - Access token refresh
    - Registration
    - Profile lookup

    All methods require an active database session.
    """

    def __init__(self, session: AsyncSession, environment: str | None = None):
        """
        Initialize AuthService.

        Args:
            session: Async database session
            environment: Deployment environment; defaults to settings.active_profile
        """
        self.session = session
        self.environment = environment or settings.active_profile
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.lockout = AccountLockoutService(session)

    # -------------------------------------------------------------------------
    # Login
    # -------------------------------------------------------------------------

    async def login(self, username: str, password: str) -> LoginResult:
        """
        Authenticate a user and issue tokens.

        The lockout bookkeeping is committed before any failure is raised so
        the request-level rollback cannot undo it.

        Raises:
            AppException: AUTHENTICATION kind for an unknown user, a wrong
                password, a disabled account or a locked account

        Example:
            result = await auth_service.login("jdoe", "s3cretpass")
            result.access_token
        """
        user = await self.user_repo.get_by_username(username)
        if user is None:
            logger.warning(f"Login attempt for unknown username: {username}")
            raise AppException.authentication(
                INVALID_CREDENTIALS_MESSAGE, error_code="INVALID_CREDENTIALS"
            )

        outcome = await self.lockout.register_attempt(user, password)
        await self.session.commit()

        if outcome is LoginAttemptOutcome.LOCKED_NOW:
            raise AppException.authentication(
                locked_now_message(user.failed_login_attempts),
                error_code="ACCOUNT_LOCKED",
            )
        if outcome is LoginAttemptOutcome.MISMATCH:
            raise AppException.authentication(
                INVALID_CREDENTIALS_MESSAGE, error_code="INVALID_CREDENTIALS"
            )

        return LoginResult(
            access_token=create_access_token(self._access_claims(user)),
            refresh_token=create_refresh_token(user.username),
            expires_in=settings.access_token_expire_minutes * 60,
            user=self.get_profile(user),
        )

    async def refresh_access_token(self, refresh_token: str) -> TokenRefreshResult:
        """
        Issue a new access token from a valid refresh token.

        The account is reloaded and must still be active and unlocked.

        Raises:
            AppException: AUTHENTICATION kind if the token is invalid, is not a
                refresh token, or its account can no longer authenticate
        """
        try:
            payload = decode_token(refresh_token)
        except JWTError:
            raise AppException.authentication(
                "Invalid or expired refresh token", error_code="INVALID_TOKEN"
            )

        if not verify_token_type(payload, TOKEN_TYPE_REFRESH):
            raise AppException.authentication(
                "Token is not a refresh token", error_code="INVALID_TOKEN"
            )

        username = payload.get("sub")
        user = await self.user_repo.get_by_username(username) if username else None
        if user is None:
            logger.warning(f"Refresh token presented for unknown user: {username}")
            raise AppException.authentication(
                "Invalid or expired refresh token", error_code="INVALID_TOKEN"
            )

        self.lockout.ensure_can_authenticate(user)

        logger.info(f"Access token refreshed for {user.username}")
        return TokenRefreshResult(
            access_token=create_access_token(self._access_claims(user)),
            expires_in=settings.access_token_expire_minutes * 60,
        )

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    async def register(self, data: RegisterRequest) -> tuple[RegisterResult, str]:
        """
        Register a new account.

        Steps, each short-circuiting:
        1. Username taken -> CONFLICT
        2. Email taken -> CONFLICT
        3. Default role missing -> INTERNAL (configuration problem)
        4. Hash password, activate only in development, persist with the role

        Returns:
            Tuple of (RegisterResult, message); the message tells whether the
            account can log in now or awaits approval
        """
        if await self.user_repo.username_exists(data.username):
            logger.warning(f"Registration attempted with existing username: {data.username}")
            raise AppException.conflict("Username is already taken")

        if await self.user_repo.email_exists(data.email):
            logger.warning(f"Registration attempted with existing email: {data.email}")
            raise AppException.conflict("Email is already registered")

        default_role = await self.role_repo.get_by_name(settings.default_role_name)
        if default_role is None:
            logger.error(
                f"Default role {settings.default_role_name!r} is missing; "
                "registration cannot proceed"
            )
            raise AppException.internal()

        active = self.environment == "development"

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            full_name=data.full_name,
            department=data.department,
            position=data.position,
            phone_number=data.phone_number,
            is_active=active,
            is_locked=False,
            failed_login_attempts=0,
            password_expired=False,
            roles=[default_role],
        )
        user = await self.user_repo.add(user)
        await self.session.commit()

        logger.info(
            f"User registered: {user.username} (active={active}, environment={self.environment})"
        )

        message = REGISTERED_ACTIVE_MESSAGE if active else REGISTERED_PENDING_MESSAGE
        return RegisterResult(user_id=user.id, username=user.username, active=active), message

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    def get_profile(self, user: User) -> AccountSummary:
        return AccountSummary(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            department=user.department,
            position=user.position,
            roles=user.role_names,
        )

    def logout(self, user: User) -> None:
        """
        Acknowledge a logout.

        Tokens are stateless; clients discard them and they expire on their own.
        """
        logger.info(f"User logged out: {user.username}")

    @staticmethod
    def _access_claims(user: User) -> dict:
        return {
            "sub": user.username,
            "full_name": user.full_name,
            "email": user.email,
            "department": user.department,
            "roles": user.role_names,
        }
