"""
API routes for the KM Portal.

This package contains all API endpoint definitions organized by feature.
"""

from api.routes import auth, boards, health, roles, users

__all__ = ["auth", "boards", "health", "roles", "users"]
