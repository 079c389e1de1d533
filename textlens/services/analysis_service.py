"""Analysis Orchestration Service.

Responsible for:
- Validating submitted text
- Running summary generation and metadata extraction concurrently
- Adding locally extracted keywords
- Assembling the immutable AnalysisRecord

The service holds no concurrency limits of its own. Callers run ``analyze``
inside a work unit submitted to the admission queue.

Usage:
    service = AnalysisService(llm_provider)

    text = validate_text(request.text, max_length=50_000)
    record = await service.analyze(text)

Failure semantics:
    If either LLM sub-operation fails, ``analyze`` raises that error and the
    other sub-operation is cancelled. No partial record is ever returned.
"""

import asyncio
import time
import uuid
from collections.abc import Callable
from datetime import datetime

from textlens.core.logging import get_logger
from textlens.integrations.llm import ExtractedMetadata, LLMProvider
from textlens.models.base import utcnow
from textlens.schemas.analysis import AnalysisMetadata, AnalysisRecord

from .exceptions import TextTooLongError, TextValidationError
from .keyword_service import extract_keywords

logger = get_logger(__name__)

DEFAULT_SHORT_TEXT_WORD_THRESHOLD = 20


def count_words(text: str) -> int:
    """Number of whitespace-separated words in ``text``."""
    return len(text.split())


def validate_text(text: str | None, *, max_length: int) -> str:
    """Check that ``text`` is present and within ``max_length``.

    The length limit applies to the trimmed text. The text is returned
    unchanged.

    Raises:
        TextValidationError: Missing, null or blank text
        TextTooLongError: Trimmed text longer than ``max_length``
    """
    if text is None or not isinstance(text, str):
        raise TextValidationError()

    trimmed_length = len(text.strip())
    if trimmed_length == 0:
        raise TextValidationError()
    if trimmed_length > max_length:
        raise TextTooLongError(provided=trimmed_length, maximum=max_length)
    return text


class AnalysisService:
    """Service that turns text into an AnalysisRecord."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        *,
        short_text_word_threshold: int = DEFAULT_SHORT_TEXT_WORD_THRESHOLD,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize analysis service.

        Args:
            llm_provider: Summary and metadata backend
            short_text_word_threshold: Texts with fewer words are used
                verbatim as their own summary
            id_factory: Source of record IDs
            clock: Source of creation timestamps (UTC)
        """
        self._llm = llm_provider
        self._short_text_word_threshold = short_text_word_threshold
        self._id_factory = id_factory
        self._clock = clock

    async def analyze(self, text: str) -> AnalysisRecord:
        """Analyze ``text``.

        Raises:
            LLMTimeoutError, LLMUnavailableError, LLMInvalidResponseError:
                propagated from the provider, unchanged
        """
        start = time.perf_counter()
        word_count = count_words(text)
        logger.info(
            "Starting analysis",
            text_length=len(text),
            word_count=word_count,
        )

        try:
            summary, extracted = await self._run_llm_operations(text, word_count)
        except Exception as e:
            logger.error(
                "Analysis failed",
                error_type=type(e).__name__,
                error=str(e),
                duration_ms=int((time.perf_counter() - start) * 1000),
            )
            raise

        record = AnalysisRecord(
            id=self._id_factory(),
            text=text,
            summary=summary,
            metadata=AnalysisMetadata(
                title=extracted.title,
                topics=list(extracted.topics),
                sentiment=extracted.sentiment,
                keywords=extract_keywords(text),
            ),
            created_at=self._clock(),
        )

        logger.info(
            "Analysis completed",
            analysis_id=str(record.id),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return record

    async def _run_llm_operations(
        self, text: str, word_count: int
    ) -> tuple[str, ExtractedMetadata]:
        """Fork-join the summary and metadata calls.

        A failure in one task cancels the other before the error propagates.
        """
        if word_count < self._short_text_word_threshold:
            logger.debug(
                "Short text, skipping summary generation",
                word_count=word_count,
                threshold=self._short_text_word_threshold,
            )
            return text, await self._llm.extract_metadata(text)

        summary_task = asyncio.ensure_future(self._llm.generate_summary(text))
        metadata_task = asyncio.ensure_future(self._llm.extract_metadata(text))
        try:
            summary, extracted = await asyncio.gather(summary_task, metadata_task)
        except BaseException:
            for task in (summary_task, metadata_task):
                task.cancel()
            await asyncio.gather(summary_task, metadata_task, return_exceptions=True)
            raise
        return summary, extracted
