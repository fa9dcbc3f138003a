"""
Pulse Copilot API

FastAPI application turning chat requests into executable DAW command plans.
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import Response

from pulse.api.routes import chat, health
from pulse.config import settings
from pulse.core.router import close_model_router, get_model_router
from pulse.core.samples.loader import get_sample_library

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Per-client rate limiting keyed by remote address
limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log the model backend and sample library at startup; close the backend client on shutdown."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Model backend: {settings.model_base_url}")
    if get_model_router().backend is None:
        logger.warning("No PULSE_MODEL_API_KEY set; every request uses the fallback responder")
    logger.info(f"Sample library: {get_sample_library().total_samples} samples")

    yield

    logger.info("Stopping copilot")
    await close_model_router()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Natural-language copilot for Pulse Studio: chat in, DAW command plans out.",
    lifespan=lifespan,
    openapi_url="/api/v1/openapi.json",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


def _handle_rate_limit(request: Request, exc: Exception) -> Response:
    """Narrow the exception type for slowapi's handler."""
    if isinstance(exc, RateLimitExceeded):
        return _rate_limit_exceeded_handler(request, exc)
    raise exc


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _handle_rate_limit)

# CORS middleware
if "*" in settings.cors_origins:
    logger.warning(
        "CORS allows every origin. "
        "Set PULSE_CORS_ORIGINS to specific domains in production."
    )
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(chat.router, prefix="/api/v1", tags=["chat"])


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs" if settings.debug else None,
    }
