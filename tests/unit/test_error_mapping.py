"""Unit tests for error handling and exception-to-HTTP mapping.

Tests:
- API error taxonomy
- Domain exception mapping
- Admission queue rejection mapping
- LLM exception mapping
- Unknown exceptions never leak details
"""

import uuid

import pytest

from textlens.core.admission import CapacityExceededError
from textlens.core.errors import (
    APIError,
    InternalServerAPIError,
    NotFoundAPIError,
    PayloadTooLargeAPIError,
    ServiceUnavailableAPIError,
    TimeoutAPIError,
    ValidationAPIError,
    map_domain_exception,
    map_exception_to_api_error,
    map_llm_exception,
)
from textlens.integrations.llm import (
    LLMAuthenticationError,
    LLMError,
    LLMInvalidResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from textlens.services.exceptions import (
    AnalysisNotFoundError,
    AnalysisPersistenceError,
    InvalidSearchQueryError,
    SearchTermTooLongError,
    ServiceError,
    TextTooLongError,
    TextValidationError,
)


class TestAPIErrorTaxonomy:
    """Tests for API error class hierarchy."""

    @pytest.mark.parametrize(
        "error_class,status,code",
        [
            (ValidationAPIError, 400, "VALIDATION_ERROR"),
            (NotFoundAPIError, 404, "RESOURCE_NOT_FOUND"),
            (PayloadTooLargeAPIError, 413, "PAYLOAD_TOO_LARGE"),
            (InternalServerAPIError, 500, "INTERNAL_ERROR"),
            (ServiceUnavailableAPIError, 503, "SERVICE_UNAVAILABLE"),
            (TimeoutAPIError, 504, "TIMEOUT"),
        ],
    )
    def test_status_and_code(self, error_class, status, code):
        error = error_class("message")
        assert error.http_status == status
        assert error.error_code == code


class TestAPIErrorResponse:
    """Tests for API error response format."""

    def test_to_response_format(self):
        error = NotFoundAPIError("Analysis not found", details={"analysis_id": "123"})
        response = error.to_response(request_id="req-456")

        assert response["error"] == "RESOURCE_NOT_FOUND"
        assert response["error_description"] == "Analysis not found"
        assert response["status_code"] == 404
        assert response["details"] == {"analysis_id": "123"}
        assert response["request_id"] == "req-456"
        assert "timestamp" in response

    def test_empty_details_are_null(self):
        response = ValidationAPIError("bad").to_response()
        assert response["details"] is None
        assert response["request_id"] is None


class TestDomainExceptionMapping:
    """Tests for ServiceError → APIError mapping."""

    def test_blank_text_is_400(self):
        api_error = map_domain_exception(TextValidationError())
        assert api_error.http_status == 400
        assert api_error.message == "Text input is required and cannot be empty"

    def test_long_text_is_413(self):
        api_error = map_domain_exception(TextTooLongError(provided=60000, maximum=50000))
        assert api_error.http_status == 413
        assert api_error.details == {"provided": 60000, "maximum": 50000}

    def test_not_found_is_404(self):
        api_error = map_domain_exception(AnalysisNotFoundError(uuid.uuid4()))
        assert api_error.http_status == 404

    def test_persistence_is_500(self):
        api_error = map_domain_exception(AnalysisPersistenceError())
        assert api_error.http_status == 500
        assert api_error.message == "Failed to store analysis"

    def test_invalid_search_is_400(self):
        api_error = map_domain_exception(
            InvalidSearchQueryError("Topic query parameter is required", parameter="topic")
        )
        assert api_error.http_status == 400
        assert api_error.details == {"parameter": "topic"}

    def test_search_term_too_long_is_413(self):
        api_error = map_domain_exception(SearchTermTooLongError(provided=300, maximum=200))
        assert api_error.http_status == 413

    def test_base_service_error_is_500(self):
        api_error = map_domain_exception(ServiceError("something"))
        assert api_error.http_status == 500


class TestLLMExceptionMapping:
    """Tests for LLMError → APIError mapping."""

    def test_timeout_is_504(self):
        api_error = map_llm_exception(LLMTimeoutError(operation="summary", timeout_seconds=30))
        assert api_error.http_status == 504
        assert api_error.message == "Analysis request timed out, please try again"

    def test_unavailable_is_503(self):
        api_error = map_llm_exception(LLMUnavailableError(status_code=529))
        assert api_error.http_status == 503

    def test_authentication_is_503(self):
        api_error = map_llm_exception(LLMAuthenticationError(status_code=401))
        assert api_error.http_status == 503
        assert "authentication" not in api_error.message.lower()

    def test_invalid_response_is_500(self):
        api_error = map_llm_exception(LLMInvalidResponseError(reason="invalid JSON"))
        assert api_error.http_status == 500
        assert api_error.message == "Failed to process LLM response"

    def test_generic_llm_error_is_500(self):
        assert map_llm_exception(LLMError("odd")).http_status == 500


class TestMapExceptionToAPIError:
    """Tests for the main entry point."""

    def test_api_error_passes_through(self):
        error = TimeoutAPIError("slow")
        assert map_exception_to_api_error(error) is error

    def test_capacity_exceeded_is_503(self):
        api_error = map_exception_to_api_error(CapacityExceededError())
        assert api_error.http_status == 503
        assert api_error.message == "Server at capacity, please try again later"

    def test_routes_llm_errors(self):
        assert map_exception_to_api_error(LLMTimeoutError()).http_status == 504

    def test_unknown_exception_is_generic_500(self):
        api_error = map_exception_to_api_error(RuntimeError("secret internals"))
        assert isinstance(api_error, APIError)
        assert api_error.http_status == 500
        assert "secret" not in api_error.message
