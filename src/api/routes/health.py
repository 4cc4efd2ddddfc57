"""
Health Check Endpoints
"""

import logging
from typing import Any

from fastapi import APIRouter, Request

from core.config import settings
from core.database import check_database_connection
from schemas.common import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=ApiResponse[dict[str, str]])
async def health_check() -> ApiResponse[dict[str, str]]:
    """
    Basic liveness check.

    Returns:
        Basic application information and status
    """
    return ApiResponse.ok(
        {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.version,
            "environment": settings.active_profile,
        }
    )


@router.get("/ready", response_model=ApiResponse[dict[str, Any]])
async def readiness_check(request: Request) -> ApiResponse[dict[str, Any]]:
    """
    Readiness check endpoint.

    Verifies database connectivity.
    """
    sessionmaker = getattr(request.app.state, "sessionmaker", None)
    db_healthy = await check_database_connection(sessionmaker)

    return ApiResponse.ok(
        {
            "status": "ready" if db_healthy else "degraded",
            "checks": {"database": "ok" if db_healthy else "ko"},
        },
        "Service is ready" if db_healthy else "Service is degraded",
    )
