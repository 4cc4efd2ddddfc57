"""
FastAPI dependencies for authentication and authorization.

This module provides:
- Current user extraction from the JWT access token
- Admin (highest-priority role) checking
- Service construction with a request-scoped database session
- Pagination query parameters
"""

import logging
from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.exceptions import AppException
from core.security import TOKEN_TYPE_ACCESS, decode_token, verify_token_type
from models.user import User
from repositories.user_repository import UserRepository
from schemas.common import PaginationParams
from services import (
    AuthService,
    BoardService,
    PermissionService,
    RoleService,
    UserService,
)
from services.lockout_service import AccountLockoutService

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI - this adds the padlock icon
security = HTTPBearer(
    scheme_name="Bearer",
    description="Enter your JWT access token",
    auto_error=False,
)


def _invalid_token(message: str = "Invalid or expired token") -> AppException:
    return AppException.authentication(message, error_code="INVALID_TOKEN")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to extract and validate current user from JWT access token.

    This dependency:
    1. Extracts Bearer token from Authorization header
    2. Decodes and validates JWT
    3. Verifies token is an access token (not refresh token)
    4. Loads the user named by the 'sub' claim, with roles
    5. Rejects disabled or locked accounts

    Raises:
        AppException (AUTHENTICATION): missing/invalid token, unknown user,
            disabled or locked account

    Usage:
        @router.get("/api/auth/me")
        async def me(current_user: CurrentUser):
            ...
    """
    if not credentials:
        logger.warning("Authentication failed: missing Bearer token")
        raise AppException.authentication("Missing authentication credentials")

    try:
        token_data = decode_token(credentials.credentials)
    except JWTError:
        raise _invalid_token()

    if not verify_token_type(token_data, TOKEN_TYPE_ACCESS):
        logger.warning("Authentication failed: wrong token type")
        raise _invalid_token("Invalid token type")

    username = token_data.get("sub")
    if not username:
        logger.warning("Authentication failed: missing subject in token")
        raise _invalid_token("Invalid token payload")

    user = await UserRepository(db).get_by_username(username)
    if user is None:
        logger.warning(f"Authentication failed: user not found - {username}")
        raise _invalid_token("User not found")

    AccountLockoutService(db).ensure_can_authenticate(user)
    return user


async def require_admin(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to ensure the user holds the highest-priority role.

    Raises:
        AppException (AUTHORIZATION): If the user is not privileged
    """
    await PermissionService(db).require_privileged(
        current_user, "Administrator privileges required"
    )
    return current_user


# ============================================================================
# Service Dependencies
# ============================================================================


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_board_service(db: AsyncSession = Depends(get_db)) -> BoardService:
    return BoardService(db)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_role_service(db: AsyncSession = Depends(get_db)) -> RoleService:
    return RoleService(db)


def get_pagination(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(default=20, ge=1, le=100, description="Items per page (max 100)"),
) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size)


# Type aliases for cleaner route signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
Pagination = Annotated[PaginationParams, Depends(get_pagination)]
