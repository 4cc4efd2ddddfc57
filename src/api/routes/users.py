"""
User administration API routes.

This module provides REST endpoints for:
- Listing, searching and per-department listings of accounts
- User statistics
- Viewing and updating an account
- Replacing the roles of an account
- Locking and unlocking accounts
- Approving (activating) and deactivating accounts

Every endpoint requires administrator privileges, except the profile
update, which the account itself may also call.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query

from api.dependencies import AdminUser, CurrentUser, Pagination, get_user_service
from schemas.common import ApiResponse, PaginatedResponse
from schemas.user import UserResponse, UserRolesUpdate, UserStatistics, UserUpdate
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=ApiResponse[PaginatedResponse[UserResponse]],
    summary="List users",
    description="Page through every account, ordered by username.",
)
async def list_users(
    current_user: AdminUser,
    pagination: Pagination,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[PaginatedResponse[UserResponse]]:
    users, total = await user_service.list_users(pagination)
    items = [UserResponse.model_validate(user) for user in users]
    return ApiResponse.ok(PaginatedResponse[UserResponse].build(items, total, pagination))


@router.get(
    "/search",
    response_model=ApiResponse[list[UserResponse]],
    summary="Search users",
    description="Case-insensitive match on username, full name or email.",
)
async def search_users(
    current_user: AdminUser,
    keyword: str = Query(min_length=1, max_length=100, description="Search keyword"),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[list[UserResponse]]:
    users = await user_service.search_users(keyword)
    return ApiResponse.ok([UserResponse.model_validate(user) for user in users])


@router.get(
    "/statistics",
    response_model=ApiResponse[UserStatistics],
    summary="User statistics",
)
async def get_statistics(
    current_user: AdminUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserStatistics]:
    return ApiResponse.ok(await user_service.get_statistics())


@router.get(
    "/department/{department}",
    response_model=ApiResponse[list[UserResponse]],
    summary="List users in a department",
)
async def list_by_department(
    department: str,
    current_user: AdminUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[list[UserResponse]]:
    users = await user_service.list_by_department(department)
    return ApiResponse.ok([UserResponse.model_validate(user) for user in users])


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Get user by ID",
)
async def get_user(
    user_id: uuid.UUID,
    current_user: AdminUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.get_user(user_id)
    return ApiResponse.ok(UserResponse.model_validate(user))


@router.put(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Update profile",
    description="Update profile fields. Allowed for the account itself or an administrator.",
)
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    current_user: CurrentUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.update_user(user_id, data, current_user)
    return ApiResponse.ok(UserResponse.model_validate(user), "Profile updated")


@router.put(
    "/{user_id}/roles",
    response_model=ApiResponse[UserResponse],
    summary="Replace roles",
    description=(
        "Replace every role the account holds. The administrator role cannot "
        "be removed from the last active account holding it."
    ),
)
async def update_user_roles(
    user_id: uuid.UUID,
    data: UserRolesUpdate,
    current_user: AdminUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.update_user_roles(user_id, data.role_ids, current_user)
    return ApiResponse.ok(UserResponse.model_validate(user), "Roles updated")


@router.post(
    "/{user_id}/lock",
    response_model=ApiResponse[UserResponse],
    summary="Lock an account",
)
async def lock_user(
    user_id: uuid.UUID,
    current_user: AdminUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.lock_user(user_id, current_user)
    return ApiResponse.ok(UserResponse.model_validate(user), "Account locked")


@router.post(
    "/{user_id}/unlock",
    response_model=ApiResponse[UserResponse],
    summary="Unlock an account",
    description="Clears the lock and the failed-login counter.",
)
async def unlock_user(
    user_id: uuid.UUID,
    current_user: AdminUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.unlock_user(user_id, current_user)
    return ApiResponse.ok(UserResponse.model_validate(user), "Account unlocked")


@router.post(
    "/{user_id}/activate",
    response_model=ApiResponse[UserResponse],
    summary="Activate an account",
    description="Approves a pending registration or re-enables a deactivated account.",
)
async def activate_user(
    user_id: uuid.UUID,
    current_user: AdminUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.set_active(user_id, True, current_user)
    return ApiResponse.ok(UserResponse.model_validate(user), "Account activated")


@router.post(
    "/{user_id}/deactivate",
    response_model=ApiResponse[UserResponse],
    summary="Deactivate an account",
)
async def deactivate_user(
    user_id: uuid.UUID,
    current_user: AdminUser,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.set_active(user_id, False, current_user)
    return ApiResponse.ok(UserResponse.model_validate(user), "Account deactivated")
