"""LLM provider integration."""

from .base import LLMProvider
from .client import AnthropicLLMProvider, parse_metadata
from .exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMInvalidResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from .models import ExtractedMetadata, Sentiment

__all__ = [
    "AnthropicLLMProvider",
    "ExtractedMetadata",
    "LLMAuthenticationError",
    "LLMError",
    "LLMInvalidResponseError",
    "LLMProvider",
    "LLMTimeoutError",
    "LLMUnavailableError",
    "Sentiment",
    "parse_metadata",
]
