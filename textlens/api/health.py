"""Health check endpoints for textlens.

Provides:
- GET /health - Full health check with all component statuses
- GET /health/live - Liveness probe
- GET /health/ready - Readiness probe

Health response includes:
- database: healthy | unhealthy
- llm: healthy | degraded | unhealthy
- admission_queue: healthy | degraded (at capacity) | unhealthy

All checks implement proper timeouts to prevent blocking.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from textlens import __version__
from textlens.core.config import get_settings
from textlens.core.database import get_engine
from textlens.core.lifespan import get_uptime_seconds
from textlens.core.logging import get_logger
from textlens.deps.services import (
    get_admission_queue_optional,
    get_llm_provider_optional,
)
from textlens.schemas.health import (
    HealthResponse,
    LivenessResponse,
    ReadinessResponse,
)
from textlens.services.health_service import HealthService

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


def _get_health_service() -> HealthService:
    """Create a HealthService instance with available dependencies."""
    return HealthService(
        engine=get_engine(),
        admission_queue=get_admission_queue_optional(),
        llm_provider=get_llm_provider_optional(),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of textlens and its dependencies.",
)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Always answers 200; the body carries the overall and per-component status.
    """
    settings = get_settings()
    health_service = _get_health_service()

    components = await health_service.check_all(
        db_timeout=settings.health_check_db_timeout,
        llm_timeout=settings.health_check_llm_timeout,
    )
    overall_status = health_service.determine_overall_status(components)

    logger.debug(
        "Health check completed",
        status=overall_status,
        components={name: comp.status for name, comp in components.items()},
    )

    return HealthResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        components=components,
        uptime_seconds=get_uptime_seconds(),
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
)
async def liveness() -> LivenessResponse:
    """Returns 200 while the process is alive. Dependencies are not checked."""
    return LivenessResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
)
async def readiness() -> ReadinessResponse:
    """Ready when the database answers and the admission queue exists.

    A saturated queue still counts as ready: overflow is answered with 503
    per request rather than by taking the instance out of rotation.
    """
    settings = get_settings()
    health_service = _get_health_service()

    db_health = await health_service.check_database(
        timeout_seconds=settings.health_check_db_timeout
    )
    if db_health.status != "healthy":
        return ReadinessResponse(
            status="not_ready",
            message=db_health.error or "Database is unhealthy",
        )

    queue_health = health_service.check_admission_queue()
    if queue_health.status == "unhealthy":
        return ReadinessResponse(status="not_ready", message=queue_health.error)

    return ReadinessResponse(status="ready")
