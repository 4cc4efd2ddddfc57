"""
Core module for the KM Portal.

Exports the application settings.
"""

from core.config import settings

__all__ = [
    # Config
    "settings",
]
