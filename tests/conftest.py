"""Shared pytest fixtures.

Provides:
- Test environment settings (set before textlens is imported)
- Fake LLM provider
- Temporary SQLite database and sessions
- Record factory
"""

import asyncio
import os
import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Set test environment before importing textlens
os.environ["APP_ENV"] = "test"
os.environ["APP_LOG_LEVEL"] = "warning"
os.environ["APP_LOG_FORMAT"] = "text"
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from textlens.core.database import build_engine, build_session_factory, create_schema
from textlens.integrations.llm import ExtractedMetadata, Sentiment
from textlens.schemas.analysis import AnalysisMetadata, AnalysisRecord

BASE_TIME = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

LONG_TEXT = (
    "The International Space Station completed another successful resupply "
    "mission this week. Engineers praised the cooperation between agencies and "
    "the reliability of the new docking hardware, which reduced preparation "
    "time significantly compared to previous missions."
)

SHORT_TEXT = "Quarterly revenue grew strongly."


# -----------------------------------------------------------------------------
# Fake LLM Provider
# -----------------------------------------------------------------------------


class FakeLLMProvider:
    """In-memory LLMProvider for tests.

    Returns canned answers, optionally after a delay, and can be told to fail
    either operation.
    """

    def __init__(
        self,
        *,
        summary: str = "A concise summary of the text.",
        metadata: ExtractedMetadata | None = None,
        delay: float = 0.0,
    ) -> None:
        self.summary = summary
        self.metadata = metadata or ExtractedMetadata(
            title="Station Resupply",
            topics=["space", "engineering", "cooperation"],
            sentiment=Sentiment.POSITIVE,
        )
        self.delay = delay
        self.summary_calls: list[str] = []
        self.metadata_calls: list[str] = []
        self.cancelled: list[str] = []
        self._failures: dict[str, Exception] = {}

    def set_failure(self, operation: str, error: Exception) -> None:
        """Make ``summary`` or ``metadata`` raise ``error``."""
        self._failures[operation] = error

    async def _run(self, operation: str) -> None:
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled.append(operation)
            raise
        if operation in self._failures:
            raise self._failures[operation]

    async def generate_summary(self, text: str) -> str:
        self.summary_calls.append(text)
        await self._run("summary")
        return self.summary

    async def extract_metadata(self, text: str) -> ExtractedMetadata:
        self.metadata_calls.append(text)
        await self._run("metadata")
        return self.metadata


@pytest.fixture
def fake_llm() -> FakeLLMProvider:
    """Provide a fake LLM provider."""
    return FakeLLMProvider()


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with the schema created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """A session bound to the test engine."""
    async with build_session_factory(test_engine)() as session:
        yield session


# -----------------------------------------------------------------------------
# Factories
# -----------------------------------------------------------------------------


def make_record(
    *,
    topics: list[str] | None = None,
    sentiment: Sentiment = Sentiment.NEUTRAL,
    title: str | None = "A Title",
    keywords: list[str] | None = None,
    minutes: int = 0,
    text: str = LONG_TEXT,
) -> AnalysisRecord:
    """Build an AnalysisRecord created ``minutes`` after BASE_TIME."""
    return AnalysisRecord(
        id=uuid.uuid4(),
        text=text,
        summary="Summary.",
        metadata=AnalysisMetadata(
            title=title,
            topics=topics or ["alpha", "beta", "gamma"],
            sentiment=sentiment,
            keywords=keywords if keywords is not None else ["station"],
        ),
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
