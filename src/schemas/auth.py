"""
Authentication Pydantic schemas for API request/response handling.

This module provides:
- Login request and result schemas
- Registration request and result schemas
- Token refresh schemas
- Availability check response
"""

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from core.security import validate_password_strength


class LoginRequest(BaseModel):
    """
    Schema for user login request.

    Attributes:
        username: Login name
        password: Plain text password
    """

    username: str = Field(min_length=1, max_length=50, description="Username")
    password: str = Field(min_length=1, description="Password")


class AccountSummary(BaseModel):
    """
    Account details returned with a successful login and by /me.

    Attributes:
        id: User ID
        username: Login name
        email: Email address
        full_name: Full name
        department: Department
        position: Job title
        roles: Role names held by the account
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    full_name: str
    department: str | None = None
    position: str | None = None
    roles: list[str] = Field(default_factory=list)

    @field_validator("roles", mode="before")
    @classmethod
    def role_names(cls, value):
        return sorted(getattr(role, "name", role) for role in value)


class LoginResult(BaseModel):
    """
    Schema for a successful login.

    Attributes:
        access_token: JWT access token
        refresh_token: JWT refresh token
        token_type: Type of token (always "bearer")
        expires_in: Access token lifetime in seconds
        user: Summary of the authenticated account
    """

    access_token: str = Field(description="JWT access token")
    refresh_token: str = Field(description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(description="Access token lifetime in seconds")
    user: AccountSummary


class TokenRefreshRequest(BaseModel):
    """Schema for token refresh request."""

    refresh_token: str = Field(min_length=1, description="JWT refresh token")


class TokenRefreshResult(BaseModel):
    """New access token minted from a refresh token."""

    access_token: str = Field(description="New JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(description="Access token lifetime in seconds")


class RegisterRequest(BaseModel):
    """
    Schema for account registration.

    Attributes:
        username: Desired login name (3-50 characters)
        email: Email address
        password: Password (validated for strength)
        full_name: Real name (2-100 characters)
        department: Optional department
        position: Optional job title
        phone_number: Optional phone number
    """

    username: str = Field(min_length=3, max_length=50, description="Username (3-50 characters)")
    email: EmailStr = Field(description="Email address")
    password: str = Field(min_length=8, description="Password (min 8 characters)")
    full_name: str = Field(min_length=2, max_length=100, description="Full name")
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=20)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        """Validate username format."""
        if not value.replace("_", "").replace("-", "").isalnum():
            raise ValueError(
                "Username can only contain letters, numbers, underscores, and hyphens"
            )
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        """Validate password strength requirements."""
        is_valid, error_message = validate_password_strength(value)
        if not is_valid:
            raise ValueError(error_message)
        return value

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Full name must be at least 2 characters")
        return value


class RegisterResult(BaseModel):
    """
    Outcome of a registration.

    Attributes:
        user_id: ID of the new account
        username: Login name
        active: Whether the account can log in right away
    """

    user_id: uuid.UUID
    username: str
    active: bool


class AvailabilityResponse(BaseModel):
    """Whether a username or email is still free."""

    value: str
    available: bool
