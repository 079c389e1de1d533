"""Pydantic schemas for API error responses.

Consistent error format for all API endpoints.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(..., description="Error type/code")
    error_description: str = Field(..., description="Human-readable error message")
    status_code: int = Field(..., description="HTTP status code")
    details: dict[str, Any] | None = Field(
        None, description="Additional error details"
    )
    request_id: str | None = Field(None, description="Request ID for tracing")
    timestamp: datetime = Field(..., description="When the error was produced")
