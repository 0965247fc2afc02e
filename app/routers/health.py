# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import ConfigStoreDep
from app.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    storage: str
    admin: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(store: ConfigStoreDep):
    """
    Readiness check endpoint.

    Checks that the config document can be read. Admin login being
    unconfigured is reported but does not make the service unready.
    """
    checks = ChecksResponse(
        storage="unknown",
        admin="configured" if settings.admin_configured else "not configured",
    )

    try:
        await store.load()
        checks.storage = "ok"
    except StorageUnavailableError as e:
        logger.warning(f"Storage check failed: {e.message}")
        checks.storage = "unavailable"

    return ReadinessResponse(
        status="ready" if checks.storage == "ok" else "not_ready",
        checks=checks,
        timestamp=_now(),
    )
