"""Anthropic Messages API client using httpx.

Implements the LLMProvider boundary: summary generation and metadata
extraction. Each call races the HTTP request against a caller-configured
timeout, so every call settles within a bounded time.
"""

import asyncio
import json
import re
import time
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from textlens.core.metrics import record_llm_request

from .exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMInvalidResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from .models import ExtractedMetadata

logger = structlog.get_logger(__name__)

ANTHROPIC_API_VERSION = "2023-06-01"

SUMMARY_PROMPT = "Provide a 1-2 sentence summary of the following text:\n\n{text}"

METADATA_PROMPT = """Analyze the following text and extract:
1. Title (if any, otherwise null)
2. Exactly 3 key topics
3. Sentiment (positive, neutral, or negative)

Return only a JSON object with this exact structure:
{{
  "title": "string or null",
  "topics": ["topic1", "topic2", "topic3"],
  "sentiment": "positive or neutral or negative"
}}

Text to analyze:
{text}"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

_METRIC_STATUS: dict[type[LLMError], str] = {
    LLMTimeoutError: "timeout",
    LLMAuthenticationError: "unavailable",
    LLMUnavailableError: "unavailable",
    LLMInvalidResponseError: "invalid_response",
}


class AnthropicLLMProvider:
    """HTTP client for the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.anthropic.com",
        model: str = "claude-3-5-sonnet-20241022",
        max_tokens: int = 1024,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: Anthropic API key
            base_url: API base URL
            model: Model identifier
            max_tokens: Completion token cap per call
            timeout_seconds: Upper bound for a single call
            transport: Optional httpx transport (tests)
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def model(self) -> str:
        return self._model

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                headers={
                    "x-api-key": self._api_key,
                    "anthropic-version": ANTHROPIC_API_VERSION,
                    "content-type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------

    async def generate_summary(self, text: str) -> str:
        """Generate a 1-2 sentence summary.

        Raises:
            LLMTimeoutError, LLMUnavailableError, LLMInvalidResponseError
        """
        completion = await self._complete(
            SUMMARY_PROMPT.format(text=text), operation="summary"
        )
        summary = completion.strip()
        if not summary:
            raise LLMInvalidResponseError(
                operation="summary", reason="empty summary"
            )
        return summary

    async def extract_metadata(self, text: str) -> ExtractedMetadata:
        """Extract title, three topics and sentiment.

        Raises:
            LLMTimeoutError, LLMUnavailableError, LLMInvalidResponseError
        """
        completion = await self._complete(
            METADATA_PROMPT.format(text=text), operation="metadata"
        )
        return parse_metadata(completion)

    async def health_check(self) -> bool:
        """Check if the API host is reachable. Never raises."""
        try:
            client = await self._get_client()
            response = await client.get("/v1/models", timeout=5.0)
            return response.status_code < 500
        except Exception as e:
            logger.warning("LLM health check failed", error=str(e))
            return False

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _complete(self, prompt: str, *, operation: str) -> str:
        """Send one prompt and return the text of the first content block."""
        start = time.perf_counter()
        try:
            payload = await asyncio.wait_for(
                self._post_message(prompt, operation=operation),
                timeout=self._timeout,
            )
            completion = _first_text_block(payload, operation=operation)
        except asyncio.TimeoutError as e:
            logger.error(
                "LLM request timed out",
                operation=operation,
                timeout=self._timeout,
            )
            error = LLMTimeoutError(operation=operation, timeout_seconds=self._timeout)
            self._record(operation, error, start)
            raise error from e
        except LLMError as e:
            self._record(operation, e, start)
            raise

        record_llm_request(operation, "success", time.perf_counter() - start)
        return completion

    async def _post_message(self, prompt: str, *, operation: str) -> dict[str, Any]:
        client = await self._get_client()
        body = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            response = await client.post("/v1/messages", json=body)
        except httpx.TimeoutException as e:
            logger.error("LLM request timed out", operation=operation, timeout=self._timeout)
            raise LLMTimeoutError(
                operation=operation, timeout_seconds=self._timeout
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "LLM connection failed",
                operation=operation,
                base_url=self._base_url,
                error=str(e),
            )
            raise LLMUnavailableError(operation=operation) from e

        if response.status_code in (401, 403):
            logger.error("LLM authentication failed", status_code=response.status_code)
            raise LLMAuthenticationError(
                operation=operation, status_code=response.status_code
            )

        if response.status_code >= 400:
            logger.error(
                "LLM HTTP error",
                operation=operation,
                status_code=response.status_code,
            )
            raise LLMUnavailableError(
                operation=operation, status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise LLMInvalidResponseError(
                operation=operation, reason="response body is not JSON"
            ) from e
        if not isinstance(payload, dict):
            raise LLMInvalidResponseError(
                operation=operation, reason="response body is not an object"
            )
        return payload

    @staticmethod
    def _record(operation: str, error: LLMError, start: float) -> None:
        status = _METRIC_STATUS.get(type(error), "error")
        record_llm_request(operation, status, time.perf_counter() - start)


def _first_text_block(payload: dict[str, Any], *, operation: str) -> str:
    content = payload.get("content")
    if not isinstance(content, list) or not content:
        raise LLMInvalidResponseError(operation=operation, reason="missing content")
    block = content[0]
    if not isinstance(block, dict) or block.get("type") != "text":
        raise LLMInvalidResponseError(
            operation=operation, reason="unexpected response type"
        )
    text = block.get("text")
    if not isinstance(text, str):
        raise LLMInvalidResponseError(operation=operation, reason="missing text")
    return text


def parse_metadata(completion: str) -> ExtractedMetadata:
    """Parse the model's JSON answer into ExtractedMetadata.

    A surrounding Markdown code fence is tolerated.

    Raises:
        LLMInvalidResponseError: Not JSON, or the JSON fails validation
    """
    content = completion.strip()
    fenced = _CODE_FENCE.match(content)
    if fenced:
        content = fenced.group(1)

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("LLM metadata is not valid JSON", error=str(e))
        raise LLMInvalidResponseError(
            operation="metadata", reason="invalid JSON"
        ) from e

    try:
        return ExtractedMetadata.model_validate(data)
    except ValidationError as e:
        logger.error(
            "LLM metadata failed validation",
            errors=[error["msg"] for error in e.errors()],
        )
        raise LLMInvalidResponseError(
            operation="metadata", reason="invalid metadata structure"
        ) from e
