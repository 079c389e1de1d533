"""Health check service for textlens.

Performs health validation for:
- SQL database connectivity
- Admission queue occupancy
- LLM provider reachability

All checks are async and implement proper timeouts.
"""

import asyncio
import time

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from textlens.core.admission import AdmissionQueue
from textlens.core.logging import get_logger
from textlens.integrations.llm import LLMProvider
from textlens.schemas.health import ComponentHealth, HealthStatus

logger = get_logger(__name__)


class HealthService:
    """Service for performing health checks on all dependencies."""

    def __init__(
        self,
        *,
        engine: AsyncEngine | None = None,
        admission_queue: AdmissionQueue | None = None,
        llm_provider: LLMProvider | None = None,
    ) -> None:
        """Initialize health service with optional dependencies.

        Args:
            engine: SQLAlchemy async engine for database checks
            admission_queue: Queue whose occupancy is reported
            llm_provider: Provider probed for reachability
        """
        self._engine = engine
        self._queue = admission_queue
        self._llm = llm_provider

    async def check_database(
        self,
        timeout_seconds: float = 5.0,
    ) -> ComponentHealth:
        """Check database connectivity with SELECT 1 and measure latency."""
        if self._engine is None:
            return ComponentHealth(
                status="unhealthy",
                error="Database engine not initialized",
            )

        start_time = time.perf_counter()

        try:
            async with asyncio.timeout(timeout_seconds):
                async with self._engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))

            return ComponentHealth(
                status="healthy",
                latency_ms=int((time.perf_counter() - start_time) * 1000),
                details={"dialect": self._engine.dialect.name},
            )

        except asyncio.TimeoutError:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(
                "Database health check timed out",
                timeout_seconds=timeout_seconds,
            )
            return ComponentHealth(
                status="unhealthy",
                latency_ms=latency_ms,
                error=f"Database health check timed out after {timeout_seconds}s",
            )

        except Exception as e:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error("Database health check failed", error=str(e))
            return ComponentHealth(
                status="unhealthy",
                latency_ms=latency_ms,
                error=f"Database connection failed: {type(e).__name__}",
            )

    def check_admission_queue(self) -> ComponentHealth:
        """Report queue occupancy. A saturated queue is degraded, not down."""
        if self._queue is None:
            return ComponentHealth(
                status="unhealthy",
                error="Admission queue not initialized",
            )

        status = self._queue.status()
        return ComponentHealth(
            status="degraded" if status.at_capacity else "healthy",
            error="Server at capacity" if status.at_capacity else None,
            details={
                "in_flight": status.in_flight,
                "queued": status.queued,
                "max_concurrent": status.max_concurrent,
                "max_queue_size": status.max_queue_size,
            },
        )

    async def check_llm(self, timeout_seconds: float = 5.0) -> ComponentHealth:
        """Probe the LLM provider. Unreachable is degraded, not unhealthy."""
        if self._llm is None:
            return ComponentHealth(
                status="unhealthy",
                error="LLM provider not initialized",
            )

        probe = getattr(self._llm, "health_check", None)
        if probe is None:
            return ComponentHealth(status="healthy")

        start_time = time.perf_counter()
        try:
            async with asyncio.timeout(timeout_seconds):
                reachable = await probe()
        except asyncio.TimeoutError:
            reachable = False

        return ComponentHealth(
            status="healthy" if reachable else "degraded",
            latency_ms=int((time.perf_counter() - start_time) * 1000),
            error=None if reachable else "LLM provider unreachable",
        )

    async def check_all(
        self,
        *,
        db_timeout: float = 5.0,
        llm_timeout: float = 5.0,
    ) -> dict[str, ComponentHealth]:
        """Check all components, the I/O-bound ones concurrently."""
        results = await asyncio.gather(
            self.check_database(timeout_seconds=db_timeout),
            self.check_llm(timeout_seconds=llm_timeout),
            return_exceptions=True,
        )

        components: dict[str, ComponentHealth] = {}

        for name, result in zip(["database", "llm"], results):
            if isinstance(result, Exception):
                logger.error(
                    "Unexpected error in health check",
                    component=name,
                    error=str(result),
                )
                components[name] = ComponentHealth(
                    status="unhealthy",
                    error=f"Health check failed: {type(result).__name__}",
                )
            else:
                components[name] = result

        components["admission_queue"] = self.check_admission_queue()
        return components

    def determine_overall_status(
        self,
        components: dict[str, ComponentHealth],
    ) -> HealthStatus:
        """Overall status, with priority unhealthy > degraded > healthy."""
        statuses = [c.status for c in components.values()]

        if "unhealthy" in statuses:
            return "unhealthy"
        if "degraded" in statuses:
            return "degraded"
        return "healthy"
