"""Pydantic schemas for health check API endpoints."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    status: HealthStatus = Field(..., description="Component health status")
    latency_ms: int | None = Field(
        None, description="Health check latency in milliseconds"
    )
    error: str | None = Field(
        None, description="Error message if unhealthy or degraded"
    )
    details: dict[str, Any] | None = Field(
        None, description="Component-specific details"
    )


class HealthResponse(BaseModel):
    """Overall status plus individual component health."""

    status: HealthStatus = Field(..., description="Overall health status")
    service: str = Field(default="textlens", description="Service name")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(..., description="Timestamp of health check")
    components: dict[str, ComponentHealth] = Field(
        ..., description="Individual component health statuses"
    )
    uptime_seconds: int | None = Field(
        None, description="Service uptime in seconds"
    )


class LivenessResponse(BaseModel):
    """Response schema for liveness probe."""

    status: Literal["ok"] = Field(default="ok", description="Liveness status")


class ReadinessResponse(BaseModel):
    """Response schema for readiness probe."""

    status: Literal["ready", "not_ready"] = Field(
        ..., description="Readiness status"
    )
    message: str | None = Field(
        None, description="Additional context for not_ready status"
    )
