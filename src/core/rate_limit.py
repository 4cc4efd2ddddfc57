from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import settings


# ============================================================================
# Rate Limiter Setup
# ============================================================================
# Shared by main.py (app.state.limiter) and the auth routes. Redis storage
# when REDIS_URL is set, in-process memory otherwise.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)
