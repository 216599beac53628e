"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from intelligence_service import __version__
from intelligence_service.config import Settings
from shared.constants import ALGORITHM_VERSION

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    algorithm_version: str
    environment: str
    timestamp: str
    dependencies: dict[str, Any]


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns the service status, version and the scoring algorithm version
    new runs are stamped with.
    """
    settings: Settings = request.app.state.settings

    return HealthResponse(
        status="healthy",
        version=__version__,
        algorithm_version=ALGORITHM_VERSION,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies={
            "database": "configured",
            "catalog_api": settings.catalog_api_base_url,
            "redis": "configured" if settings.redis_enabled else "disabled",
        },
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse:
    """
    Readiness check endpoint.

    The database is required; the catalog cache is reported but optional.
    """
    checks: dict[str, bool] = {}

    session_factory = getattr(request.app.state, "session_factory", None)
    try:
        if session_factory is None:
            raise RuntimeError("database not initialised")
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except (SQLAlchemyError, RuntimeError) as e:
        logger.warning("Database readiness check failed", error=str(e))
        checks["database"] = False

    cache = getattr(request.app.state, "catalog_cache", None)
    checks["catalog_cache"] = bool(cache) and await cache.health_check()

    return ReadinessResponse(
        ready=checks["database"],
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.

    Simple endpoint that returns 200 if the service is running.
    """
    return {"status": "alive"}
