"""LLM provider integration exceptions.

Every provider call surfaces exactly one of three failure categories:

- LLMTimeoutError: the call did not finish within its timeout
- LLMUnavailableError: upstream unreachable, overloaded, rate limited or
  rejecting our credentials (LLMAuthenticationError)
- LLMInvalidResponseError: upstream answered but the payload is unusable
"""

from typing import Any


class LLMError(Exception):
    """Base exception for all LLM provider errors."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.details = details or {}
        if operation:
            self.details.setdefault("operation", operation)

    def __str__(self) -> str:
        if self.operation:
            return f"{self.message} [operation: {self.operation}]"
        return self.message


class LLMTimeoutError(LLMError):
    """LLM call exceeded its timeout."""

    def __init__(
        self,
        message: str = "Analysis request timed out, please try again",
        *,
        operation: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, operation=operation, details=details)
        self.timeout_seconds = timeout_seconds


class LLMUnavailableError(LLMError):
    """LLM service cannot serve the request right now.

    Covers connection failures, 429/5xx responses and provider overload.
    Retryable with backoff.
    """

    def __init__(
        self,
        message: str = "LLM service temporarily unavailable, please try again later",
        *,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if status_code is not None:
            details["upstream_status"] = status_code
        super().__init__(message, operation=operation, details=details)
        self.status_code = status_code


class LLMAuthenticationError(LLMUnavailableError):
    """LLM service rejected our credentials."""

    def __init__(
        self,
        message: str = "LLM service authentication failed",
        *,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, operation=operation, status_code=status_code)


class LLMInvalidResponseError(LLMError):
    """LLM response could not be parsed or failed validation."""

    def __init__(
        self,
        message: str = "Failed to process LLM response",
        *,
        operation: str | None = None,
        reason: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if reason:
            details["reason"] = reason
        super().__init__(message, operation=operation, details=details)
        self.reason = reason
