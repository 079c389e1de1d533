"""Pydantic schemas for the textlens API."""

from textlens.schemas.analysis import (
    AnalysisMetadata,
    AnalysisRecord,
    AnalysisRequest,
)
from textlens.schemas.error import ErrorResponse
from textlens.schemas.health import (
    ComponentHealth,
    HealthResponse,
    LivenessResponse,
    ReadinessResponse,
)

__all__ = [
    # Analysis schemas
    "AnalysisMetadata",
    "AnalysisRecord",
    "AnalysisRequest",
    # Health schemas
    "ComponentHealth",
    "HealthResponse",
    "LivenessResponse",
    "ReadinessResponse",
    # Error schemas
    "ErrorResponse",
]
