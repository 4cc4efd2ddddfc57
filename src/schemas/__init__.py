"""
Pydantic schemas for API request/response validation.

This package provides all Pydantic models used for:
- Request validation
- Response serialization (always inside the ApiResponse envelope)
- API documentation
"""

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
from schemas.board import (
    BoardCreate,
    BoardListItem,
    BoardResponse,
    BoardStatistics,
    BoardUpdate,
)
from schemas.common import (
    ApiResponse,
    FieldError,
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    SortOrder,
)
from schemas.role import RoleResponse
from schemas.user import (
    UserEmbedded,
    UserResponse,
    UserRolesUpdate,
    UserStatistics,
    UserUpdate,
)

__all__ = [
    # Common schemas
    "ApiResponse",
    "FieldError",
    "PaginationParams",
    "PaginationMeta",
    "PaginatedResponse",
    "SortOrder",
    # Auth schemas
    "AccountSummary",
    "AvailabilityResponse",
    "LoginRequest",
    "LoginResult",
    "RegisterRequest",
    "RegisterResult",
    "TokenRefreshRequest",
    "TokenRefreshResult",
    # Board schemas
    "BoardCreate",
    "BoardUpdate",
    "BoardResponse",
    "BoardListItem",
    "BoardStatistics",
    # User schemas
    "UserResponse",
    "UserEmbedded",
    "UserUpdate",
    "UserRolesUpdate",
    "UserStatistics",
    # Role schemas
    "RoleResponse",
]
