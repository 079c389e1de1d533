"""Centralized error handling and exception-to-HTTP mapping.

This module provides:
1. API-facing error taxonomy (APIError hierarchy)
2. Exception-to-HTTP mapping for domain, admission and LLM errors
3. FastAPI exception handlers for consistent error responses

Error Response Format:
{
    "error": "ERROR_CODE",
    "error_description": "Human readable message",
    "status_code": 503,
    "details": { ... },
    "request_id": "<uuid>",
    "timestamp": "<iso8601>"
}

Retry Semantics (via HTTP status codes):
- 503/504 → Retryable with backoff
- 500 → Retryable, may fail again for the same input
- 4xx → NOT retryable

Usage:
    from textlens.core.errors import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from textlens.core.admission import CapacityExceededError
from textlens.core.logging import get_logger
from textlens.integrations.llm.exceptions import (
    LLMError,
    LLMInvalidResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from textlens.services.exceptions import (
    AnalysisError,
    AnalysisNotFoundError,
    AnalysisPersistenceError,
    InvalidSearchQueryError,
    SearchError,
    SearchTermTooLongError,
    ServiceError,
    TextTooLongError,
    TextValidationError,
)

logger = get_logger(__name__)


# =============================================================================
# API Error Taxonomy
# =============================================================================


class APIError(Exception):
    """Base class for API-facing errors.

    All API errors must define:
    - error_code: SCREAMING_SNAKE_CASE identifier
    - http_status: HTTP status code
    - message: Human-readable description
    - details: Optional additional context (dict)
    """

    error_code: str = "INTERNAL_ERROR"
    http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self, request_id: str | None = None) -> dict[str, Any]:
        """Convert to API error response format."""
        return {
            "error": self.error_code,
            "error_description": self.message,
            "status_code": self.http_status,
            "details": self.details if self.details else None,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class ValidationAPIError(APIError):
    """Request validation failed (400)."""

    error_code = "VALIDATION_ERROR"
    http_status = 400


class NotFoundAPIError(APIError):
    """Resource not found (404)."""

    error_code = "RESOURCE_NOT_FOUND"
    http_status = 404


class MethodNotAllowedAPIError(APIError):
    """HTTP method not supported on this route (405)."""

    error_code = "METHOD_NOT_ALLOWED"
    http_status = 405


class PayloadTooLargeAPIError(APIError):
    """Request input exceeds a size limit (413)."""

    error_code = "PAYLOAD_TOO_LARGE"
    http_status = 413


class ServiceUnavailableAPIError(APIError):
    """Server at capacity or downstream service unavailable (503)."""

    error_code = "SERVICE_UNAVAILABLE"
    http_status = 503


class TimeoutAPIError(APIError):
    """Downstream timeout (504)."""

    error_code = "TIMEOUT"
    http_status = 504


class InternalServerAPIError(APIError):
    """Internal server error (500)."""

    error_code = "INTERNAL_ERROR"
    http_status = 500


# =============================================================================
# Exception → API Error Mapping
# =============================================================================


def map_domain_exception(exc: ServiceError) -> APIError:
    """Map domain service exceptions to API errors.

    Args:
        exc: Domain service exception

    Returns:
        Appropriate APIError subclass
    """
    # -------------------------------------------------------------------------
    # Input Exceptions
    # -------------------------------------------------------------------------
    if isinstance(exc, TextValidationError):
        return ValidationAPIError(message=exc.message, details=exc.details)

    if isinstance(exc, TextTooLongError):
        return PayloadTooLargeAPIError(message=exc.message, details=exc.details)

    # -------------------------------------------------------------------------
    # Analysis Exceptions
    # -------------------------------------------------------------------------
    if isinstance(exc, AnalysisNotFoundError):
        return NotFoundAPIError(message=exc.message, details=exc.details)

    if isinstance(exc, AnalysisPersistenceError):
        return InternalServerAPIError(
            message="Failed to store analysis",
            details=exc.details,
        )

    if isinstance(exc, AnalysisError):
        return InternalServerAPIError(
            message="Analysis failed",
            details=exc.details,
        )

    # -------------------------------------------------------------------------
    # Search Exceptions
    # -------------------------------------------------------------------------
    if isinstance(exc, InvalidSearchQueryError):
        return ValidationAPIError(message=exc.message, details=exc.details)

    if isinstance(exc, SearchTermTooLongError):
        return PayloadTooLargeAPIError(message=exc.message, details=exc.details)

    if isinstance(exc, SearchError):
        return InternalServerAPIError(
            message="Search failed",
            details=exc.details,
        )

    # Base ServiceError
    return InternalServerAPIError(
        message="Service error",
        details=exc.details,
    )


def map_llm_exception(exc: LLMError) -> APIError:
    """Map LLM integration exceptions to API errors.

    Authentication failures are reported as 503: the client cannot fix
    them, and the upstream error text is never forwarded.

    Args:
        exc: LLM provider exception

    Returns:
        Appropriate APIError subclass
    """
    details = {"operation": exc.operation} if exc.operation else None

    if isinstance(exc, LLMTimeoutError):
        return TimeoutAPIError(
            message="Analysis request timed out, please try again",
            details=details,
        )

    if isinstance(exc, LLMUnavailableError):
        return ServiceUnavailableAPIError(
            message="Analysis service temporarily unavailable, please try again later",
            details=details,
        )

    if isinstance(exc, LLMInvalidResponseError):
        return InternalServerAPIError(
            message="Failed to process LLM response",
            details=details,
        )

    # Generic LLM error
    return InternalServerAPIError(
        message="Analysis failed",
        details=details,
    )


def map_capacity_exception(exc: CapacityExceededError) -> APIError:
    """Map admission queue rejection to 503."""
    return ServiceUnavailableAPIError(
        message="Server at capacity, please try again later",
        details=exc.details,
    )


def map_exception_to_api_error(exc: Exception) -> APIError:
    """Map any exception to an API error.

    This is the main entry point for exception mapping.

    Args:
        exc: Any exception

    Returns:
        Appropriate APIError subclass
    """
    # Already an API error
    if isinstance(exc, APIError):
        return exc

    if isinstance(exc, ServiceError):
        return map_domain_exception(exc)

    if isinstance(exc, CapacityExceededError):
        return map_capacity_exception(exc)

    if isinstance(exc, LLMError):
        return map_llm_exception(exc)

    # Unknown exceptions → Internal Server Error
    return InternalServerAPIError(
        message="An unexpected error occurred",
        details={"exception_type": type(exc).__name__},
    )


# =============================================================================
# Helper Functions
# =============================================================================


def get_request_id(request: Request) -> str | None:
    """Extract request ID from request state."""
    return getattr(request.state, "request_id", None)


def create_error_response(
    api_error: APIError,
    request_id: str | None = None,
) -> JSONResponse:
    """Create a JSONResponse from an API error."""
    return JSONResponse(
        status_code=api_error.http_status,
        content=api_error.to_response(request_id),
    )


# =============================================================================
# FastAPI Exception Handlers
# =============================================================================


async def api_error_handler(
    request: Request,
    exc: APIError,
) -> JSONResponse:
    """Handle APIError exceptions."""
    request_id = get_request_id(request)

    logger.warning(
        "API error",
        error_code=exc.error_code,
        status_code=exc.http_status,
        message=exc.message,
        path=request.url.path,
    )

    return create_error_response(exc, request_id)


async def service_error_handler(
    request: Request,
    exc: ServiceError,
) -> JSONResponse:
    """Handle domain service exceptions."""
    request_id = get_request_id(request)
    api_error = map_domain_exception(exc)

    logger.warning(
        "Domain service error",
        exception_type=type(exc).__name__,
        error_code=api_error.error_code,
        status_code=api_error.http_status,
        message=api_error.message,
        path=request.url.path,
    )

    return create_error_response(api_error, request_id)


async def capacity_error_handler(
    request: Request,
    exc: CapacityExceededError,
) -> JSONResponse:
    """Handle admission queue rejections."""
    request_id = get_request_id(request)
    api_error = map_capacity_exception(exc)

    logger.warning(
        "Request rejected at capacity",
        error_code=api_error.error_code,
        status_code=api_error.http_status,
        path=request.url.path,
    )

    return create_error_response(api_error, request_id)


async def llm_error_handler(
    request: Request,
    exc: LLMError,
) -> JSONResponse:
    """Handle LLM integration exceptions."""
    request_id = get_request_id(request)
    api_error = map_llm_exception(exc)

    logger.warning(
        "LLM integration error",
        exception_type=type(exc).__name__,
        operation=exc.operation,
        upstream_message=exc.message,
        error_code=api_error.error_code,
        status_code=api_error.http_status,
        path=request.url.path,
    )

    return create_error_response(api_error, request_id)


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle FastAPI request validation errors."""
    request_id = get_request_id(request)

    error_details = []
    for error in exc.errors():
        error_details.append({
            "loc": list(error.get("loc", [])),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        })

    api_error = ValidationAPIError(
        message="Request validation failed",
        details={"errors": error_details},
    )

    logger.warning(
        "Validation error",
        error_count=len(error_details),
        path=request.url.path,
    )

    return create_error_response(api_error, request_id)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) in the standard format."""
    request_id = get_request_id(request)

    if exc.status_code == 404:
        api_error: APIError = NotFoundAPIError(message="Resource not found")
    elif exc.status_code == 405:
        api_error = MethodNotAllowedAPIError(message="Method not allowed")
    else:
        api_error = APIError(message=str(exc.detail))
        api_error.http_status = exc.status_code
        api_error.error_code = "HTTP_ERROR"

    return create_error_response(api_error, request_id)


async def pydantic_validation_error_handler(
    request: Request,
    exc: PydanticValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors (from response serialization)."""
    request_id = get_request_id(request)

    logger.error(
        "Response serialization error",
        error_count=exc.error_count(),
        path=request.url.path,
    )

    api_error = InternalServerAPIError(message="Response serialization failed")
    return create_error_response(api_error, request_id)


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Fallback handler for uncaught exceptions.

    NEVER leaks internal exception details to clients.
    Always returns a generic 500 Internal Server Error.
    """
    request_id = get_request_id(request)

    logger.exception(
        "Unhandled exception",
        exception_type=type(exc).__name__,
        path=request.url.path,
    )

    api_error = InternalServerAPIError(
        message="An unexpected error occurred",
    )

    return create_error_response(api_error, request_id)


# =============================================================================
# Registration Function
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    # API errors (highest priority - explicit API errors)
    app.add_exception_handler(APIError, api_error_handler)

    # Domain service errors
    app.add_exception_handler(ServiceError, service_error_handler)

    # Admission and integration errors
    app.add_exception_handler(CapacityExceededError, capacity_error_handler)
    app.add_exception_handler(LLMError, llm_error_handler)

    # Validation and routing errors
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Fallback for all other exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
