"""
User Pydantic schemas for account administration.

This module provides:
- Full account response and the minimal author view embedded in boards
- Profile update and role assignment requests
- User statistics response
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserResponse(BaseModel):
    """
    Full account view returned by the admin endpoints.

    Attributes:
        id: User ID
        username: Login name
        email: Email address
        full_name: Full name
        department / position / phone_number: Profile fields
        is_active: Approved and enabled
        is_locked: Locked after repeated login failures
        locked_at: When the lock happened
        failed_login_attempts: Consecutive failures since the last success
        password_expired: Password change required
        last_login_at: Last successful login
        roles: Role names
        created_at / updated_at: Timestamps
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    full_name: str
    department: str | None = None
    position: str | None = None
    phone_number: str | None = None
    is_active: bool
    is_locked: bool
    locked_at: datetime | None = None
    failed_login_attempts: int
    password_expired: bool
    last_login_at: datetime | None = None
    roles: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("roles", mode="before")
    @classmethod
    def role_names(cls, value):
        return sorted(getattr(role, "name", role) for role in value)


class UserEmbedded(BaseModel):
    """Minimal author information embedded in board responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    full_name: str


class UserUpdate(BaseModel):
    """
    Schema for updating profile fields.

    All fields are optional; only the ones sent are changed. Username,
    status flags and roles have their own endpoints.
    """

    email: EmailStr | None = Field(default=None, description="New email address")
    full_name: str | None = Field(
        default=None, min_length=1, max_length=100, description="New full name"
    )
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=20)

    @field_validator("full_name")
    @classmethod
    def full_name_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("Full name must not be blank")
        return value.strip() if value is not None else None


class UserRolesUpdate(BaseModel):
    """
    Replacement role set for an account.

    Attributes:
        role_ids: IDs of every role the account should hold afterwards
    """

    role_ids: list[uuid.UUID] = Field(min_length=1, description="Role IDs to assign")


class UserStatistics(BaseModel):
    """
    Aggregate account figures.

    Attributes:
        total_users: All accounts
        active_users: Approved and enabled accounts
        inactive_users: Pending or deactivated accounts
        locked_users: Accounts currently locked
        new_users_this_week: Accounts created in the last seven days
        department_stats: Active accounts per department; accounts without
            one are counted under "unassigned"
    """

    total_users: int
    active_users: int
    inactive_users: int
    locked_users: int
    new_users_this_week: int
    department_stats: dict[str, int]
