"""Domain service exceptions.

These are business-logic level exceptions, not HTTP or transport errors.
They are mapped to API responses in textlens.core.errors.
"""

from typing import Any
from uuid import UUID


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# -----------------------------------------------------------------------------
# Input Validation Exceptions
# -----------------------------------------------------------------------------


class TextValidationError(ServiceError):
    """Submitted text is missing or blank."""

    def __init__(
        self, message: str = "Text input is required and cannot be empty"
    ) -> None:
        super().__init__(message)


class TextTooLongError(ServiceError):
    """Submitted text exceeds the configured maximum length."""

    def __init__(self, provided: int, maximum: int) -> None:
        super().__init__(
            f"Text exceeds maximum length of {maximum:,} characters",
            details={"provided": provided, "maximum": maximum},
        )
        self.provided = provided
        self.maximum = maximum


# -----------------------------------------------------------------------------
# Analysis Exceptions
# -----------------------------------------------------------------------------


class AnalysisError(ServiceError):
    """Base exception for analysis and storage errors."""

    pass


class AnalysisNotFoundError(AnalysisError):
    """No stored analysis has the requested ID."""

    def __init__(self, analysis_id: UUID | str) -> None:
        super().__init__(
            f"Analysis not found: {analysis_id}",
            details={"analysis_id": str(analysis_id)},
        )
        self.analysis_id = analysis_id


class AnalysisPersistenceError(AnalysisError):
    """Writing or reading an analysis failed in the database."""

    def __init__(
        self,
        message: str = "Failed to store analysis",
        *,
        analysis_id: UUID | str | None = None,
        cause: Exception | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if analysis_id is not None:
            details["analysis_id"] = str(analysis_id)
        if cause is not None:
            details["cause"] = type(cause).__name__
        super().__init__(message, details=details)
        self.analysis_id = analysis_id
        self.cause = cause


# -----------------------------------------------------------------------------
# Search Exceptions
# -----------------------------------------------------------------------------


class SearchError(ServiceError):
    """Base exception for search errors."""

    pass


class InvalidSearchQueryError(SearchError):
    """Search parameters failed validation."""

    def __init__(self, message: str, *, parameter: str) -> None:
        super().__init__(message, details={"parameter": parameter})
        self.parameter = parameter


class SearchTermTooLongError(SearchError):
    """Search term exceeds the configured maximum length."""

    def __init__(self, provided: int, maximum: int) -> None:
        super().__init__(
            f"Search topic exceeds maximum length of {maximum} characters",
            details={"provided": provided, "maximum": maximum},
        )
        self.provided = provided
        self.maximum = maximum
