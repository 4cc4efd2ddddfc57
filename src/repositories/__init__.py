"""
Database repositories for the KM Portal.

This module exports all repository classes for database operations.
"""

from repositories.base import BaseRepository
from repositories.board_repository import BoardRepository, BoardSortField
from repositories.role_repository import RoleRepository
from repositories.user_repository import LoginFailureState, UserRepository

__all__ = [
    "BaseRepository",
    "BoardRepository",
    "BoardSortField",
    "LoginFailureState",
    "RoleRepository",
    "UserRepository",
]
