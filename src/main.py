"""
FastAPI application entry point.

This module sets up:
- FastAPI application with middleware
- Exception handlers (every failure becomes an ApiResponse envelope)
- Rate limiting
- API routes
- CORS configuration
"""

import logging

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import auth, boards, health, roles, users
from core import settings
from core.exceptions import AppException
from core.handlers import (
    app_exception_handler,
    general_exception_handler,
    http_exception_handler,
    integrity_error_handler,
    rate_limit_handler,
    validation_exception_handler,
)
from core.lifespan import lifespan
from core.logging import setup_logging
from core.middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from core.rate_limit import limiter

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


# ============================================================================
# FastAPI Application
# ============================================================================
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description=settings.description,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Attach rate limiter to app
app.state.limiter = limiter


# ============================================================================
# Exception Handlers
# ============================================================================
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(Exception, general_exception_handler)


# ============================================================================
# Middleware Setup (last added runs first)
# ============================================================================
# 1. Security headers (innermost)
app.add_middleware(
    SecurityHeadersMiddleware,
    enable_hsts=settings.is_production,
)

# 2. Request logging (sees the request id set by the next middleware)
app.add_middleware(RequestLoggingMiddleware)

# 3. Request ID
app.add_middleware(RequestIDMiddleware)

# 4. CORS (outermost, so preflight requests are answered directly)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# API Routes
# ============================================================================
v1_router = APIRouter(prefix="/v1")
v1_router.include_router(boards.router)
v1_router.include_router(users.router)
v1_router.include_router(roles.router)

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(v1_router)

app.include_router(health.router)
app.include_router(api_router)
