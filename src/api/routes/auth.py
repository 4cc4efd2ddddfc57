"""
Authentication API routes.

This module provides REST endpoints for:
- Login
- Registration
- Access token refresh
- Current profile and logout
- Username / email availability checks
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import EmailStr

from api.dependencies import CurrentUser, get_auth_service, get_user_service
from core.config import settings
from core.rate_limit import limiter
from schemas.auth import (
    AccountSummary,
    AvailabilityResponse,
    LoginRequest,
    LoginResult,
    RegisterRequest,
    RegisterResult,
    TokenRefreshRequest,
    TokenRefreshResult,
)
from schemas.common import ApiResponse
from services.auth_service import AuthService
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=ApiResponse[LoginResult],
    status_code=status.HTTP_200_OK,
    summary="Log in",
    description="""
    Authenticate with username and password.

    After too many consecutive failures the account is locked and has to be
    unlocked by an administrator.

    **Rate Limit:** Configurable via RATE_LIMIT_LOGIN
    """,
)
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[LoginResult]:
    result = await auth_service.login(credentials.username, credentials.password)
    return ApiResponse.ok(result, "Login successful")


@router.post(
    "/register",
    response_model=ApiResponse[RegisterResult],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="""
    Register a new account with the default role.

    In development the account is active immediately; elsewhere it waits for
    administrator approval.

    **Rate Limit:** Configurable via RATE_LIMIT_REGISTER
    """,
)
@limiter.limit(settings.rate_limit_register)
async def register(
    request: Request,
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[RegisterResult]:
    result, message = await auth_service.register(data)
    return ApiResponse.ok(result, message)


@router.post(
    "/refresh",
    response_model=ApiResponse[TokenRefreshResult],
    summary="Refresh access token",
)
@limiter.limit(settings.rate_limit_token_refresh)
async def refresh(
    request: Request,
    data: TokenRefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[TokenRefreshResult]:
    result = await auth_service.refresh_access_token(data.refresh_token)
    return ApiResponse.ok(result, "Access token refreshed")


@router.get(
    "/me",
    response_model=ApiResponse[AccountSummary],
    summary="Current account",
)
async def me(
    current_user: CurrentUser,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AccountSummary]:
    return ApiResponse.ok(auth_service.get_profile(current_user))


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Log out",
    description="Tokens are stateless; the client discards them.",
)
async def logout(
    current_user: CurrentUser,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[None]:
    auth_service.logout(current_user)
    return ApiResponse.ok(message="Logged out")


@router.get(
    "/check-username",
    response_model=ApiResponse[AvailabilityResponse],
    summary="Check username availability",
)
async def check_username(
    username: str = Query(min_length=3, max_length=50),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[AvailabilityResponse]:
    available = await user_service.username_available(username)
    message = "Username is available" if available else "Username is already taken"
    return ApiResponse.ok(AvailabilityResponse(value=username, available=available), message)


@router.get(
    "/check-email",
    response_model=ApiResponse[AvailabilityResponse],
    summary="Check email availability",
)
async def check_email(
    email: EmailStr = Query(),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[AvailabilityResponse]:
    available = await user_service.email_available(email)
    message = "Email is available" if available else "Email is already registered"
    return ApiResponse.ok(AvailabilityResponse(value=email, available=available), message)
