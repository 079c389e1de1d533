"""External service integrations.

This package contains integration clients for external services:
- llm: LLM provider used for summaries and metadata extraction
"""

from .llm import AnthropicLLMProvider, LLMProvider

__all__ = ["AnthropicLLMProvider", "LLMProvider"]
