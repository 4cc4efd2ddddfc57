"""
Service layer for business logic.

This package provides service classes that implement business logic,
coordinate between repositories, and handle transaction management.
"""

from services.auth_service import AuthService
from services.board_service import BoardService
from services.lockout_service import AccountLockoutService, LoginAttemptOutcome
from services.permission_service import PermissionService
from services.role_service import RoleService
from services.user_service import UserService

__all__ = [
    "AccountLockoutService",
    "AuthService",
    "BoardService",
    "LoginAttemptOutcome",
    "PermissionService",
    "RoleService",
    "UserService",
]
