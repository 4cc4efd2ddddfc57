"""
Database models for the KM Portal.

This module exports all SQLAlchemy models and the declarative base.
Import models from this module to ensure proper initialization.
"""

from models.base import Base
from models.board import Board
from models.mixins import SoftDeleteMixin, TimestampMixin
from models.user import Role, User, user_roles

__all__ = [
    # Base
    "Base",
    # Mixins
    "TimestampMixin",
    "SoftDeleteMixin",
    # Account models
    "User",
    "Role",
    "user_roles",
    # Content models
    "Board",
]
