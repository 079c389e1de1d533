"""LLM provider capability boundary."""

from typing import Protocol, runtime_checkable

from .models import ExtractedMetadata


@runtime_checkable
class LLMProvider(Protocol):
    """What the analysis orchestrator needs from an LLM backend.

    Implementations must enforce their own timeout so that every call
    settles, and raise only LLMError subclasses on failure.
    """

    async def generate_summary(self, text: str) -> str:
        """Return a one to two sentence summary of ``text``."""
        ...

    async def extract_metadata(self, text: str) -> ExtractedMetadata:
        """Return title, three topics and sentiment for ``text``."""
        ...
