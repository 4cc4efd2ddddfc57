"""
Security utilities for authentication.

This module provides:
- Password hashing with Argon2id
- JWT token generation and validation (access and refresh tokens)
- Password strength validation

Token issuance is the only place that knows the signing algorithm; services
hand over claims and get an opaque string back.
"""

import logging
import re
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import (
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)
from jose import JWTError, jwt

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# Password Hashing with Argon2id
# =============================================================================

pwd_hasher = PasswordHasher(
    time_cost=settings.argon2_time_cost,
    memory_cost=settings.argon2_memory_cost,
    parallelism=settings.argon2_parallelism,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: Plain text password to hash

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)
    """
    return pwd_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against an Argon2id hash.

    Args:
        password: Plain text password to verify
        hashed_password: Argon2id hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    try:
        pwd_hasher.verify(hashed_password, password)
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def validate_password_strength(password: str) -> tuple[bool, str | None]:
    """
    Validate password strength against security requirements.

    Requirements:
    - Minimum 8 characters
    - At least 1 letter
    - At least 1 digit

    Returns:
        Tuple of (is_valid, error_message)
    """
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"

    if not re.search(r"[A-Za-z]", password):
        return False, "Password must contain at least one letter"

    if not re.search(r"\d", password):
        return False, "Password must contain at least one digit"

    return True, None


# =============================================================================
# JWT Token Management
# =============================================================================
# Access tokens carry the account summary used by the portal front-end.
# Refresh tokens carry only the username and are used to mint new access tokens.
# =============================================================================

ALGORITHM = "HS256"

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


def _encode(claims: dict[str, Any], token_type: str, expire: datetime) -> str:
    now = datetime.now(UTC)
    to_encode = claims.copy()
    to_encode.update(
        {
            "exp": expire,
            "iat": now,
            "type": token_type,
            "jti": str(uuid.uuid4()),
        }
    )
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode. Must contain 'sub' (the username).
        expires_delta: Optional custom lifetime. Defaults to
                       settings.access_token_expire_minutes.

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token({"sub": "jdoe", "roles": ["ROLE_USER"]})
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(data, TOKEN_TYPE_ACCESS, datetime.now(UTC) + expires_delta)


def create_refresh_token(
    subject: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT refresh token bound to a username.

    Args:
        subject: Username the token is issued for
        expires_delta: Optional custom lifetime. Defaults to
                       settings.refresh_token_expire_days.

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return _encode({"sub": subject}, TOKEN_TYPE_REFRESH, datetime.now(UTC) + expires_delta)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token (signature, expiry, format).

    Raises:
        JWTError: If token is invalid, expired, or malformed
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise


def verify_token_type(token_data: dict[str, Any], expected_type: str) -> bool:
    """Check that decoded claims belong to the expected token type."""
    return token_data.get("type") == expected_type
