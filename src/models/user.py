"""
User and Role models.

This module defines:
- User: portal account with credentials, profile and lockout state
- Role: named privilege level; lower priority value means more privilege
- user_roles: many-to-many association table between users and roles

Architecture:
- Users hold an unordered set of roles (many-to-many)
- Roles are reference data seeded by migration (ROLE_ADMIN, ROLE_USER, ...)
- Accounts are never hard-deleted; they are deactivated instead
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base
from models.mixins import TimestampMixin


# =============================================================================
# Association Table
# =============================================================================

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        UUID(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


# =============================================================================
# Role Model
# =============================================================================


class Role(Base, TimestampMixin):
    """
    Role reference data.

    Attributes:
        id: UUID primary key
        name: Unique role name with the ROLE_ prefix (e.g. ROLE_ADMIN)
        display_name: Human-readable label
        description: Optional description
        priority: Privilege rank, lower value means higher privilege
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
    )

    display_name: Mapped[str] = mapped_column(String(100), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    priority: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=100,
        index=True,
    )

    def __repr__(self) -> str:
        return f"Role(name={self.name}, priority={self.priority})"


# =============================================================================
# User Model
# =============================================================================


class User(Base, TimestampMixin):
    """
    Portal account.

    Attributes:
        id: UUID primary key
        username: Unique login name
        email: Unique email address
        password_hash: Argon2id hashed password
        full_name: User's full name
        department: Organisational department
        position: Job title
        phone_number: Contact number
        is_active: False while pending approval or after deactivation
        is_locked: True after too many consecutive failed logins
        locked_at: When the account was locked
        failed_login_attempts: Consecutive failed logins since the last success
        password_expired: Password must be changed before next use
        last_login_at: Timestamp of last successful login
        roles: Assigned roles

    Security:
        - Inactive or locked accounts cannot authenticate, whatever the password
        - failed_login_attempts is only changed through atomic UPDATE statements
    """

    __tablename__ = "users"

    # Authentication fields
    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile fields
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    position: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Status flags
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    locked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    failed_login_attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    password_expired: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Activity tracking
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    roles: Mapped[list[Role]] = relationship(
        Role,
        secondary=user_roles,
        lazy="selectin",
    )

    @property
    def role_names(self) -> list[str]:
        return sorted(role.name for role in self.roles)

    def has_role(self, role_name: str) -> bool:
        return any(role.name == role_name for role in self.roles)

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username}, email={self.email})"
