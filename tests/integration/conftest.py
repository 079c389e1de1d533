"""Shared pytest fixtures for integration tests.

Provides:
- Test application wired to a temporary SQLite database
- Fake LLM provider and a small admission queue
- HTTP client for API testing
- Seeded analyses
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from textlens.core.admission import AdmissionQueue
from textlens.core.database import build_session_factory
from textlens.main import create_application
from textlens.schemas.analysis import AnalysisRecord
from textlens.services.storage_service import AnalysisStorageService
from tests.conftest import FakeLLMProvider, make_record


@pytest_asyncio.fixture
async def admission_queue() -> AdmissionQueue:
    """Queue with room for two running and two waiting requests."""
    return AdmissionQueue(max_concurrent=2, max_queue_size=2, name="test")


@pytest_asyncio.fixture
async def app(
    test_engine: AsyncEngine,
    fake_llm: FakeLLMProvider,
    admission_queue: AdmissionQueue,
) -> AsyncGenerator[FastAPI, None]:
    """Create the application with test dependencies installed.

    ASGITransport does not run lifespan events, so the globals the lifespan
    would set up are installed here instead.
    """
    import textlens.core.database as db_module
    import textlens.deps.services as services_module

    db_module._engine = test_engine
    db_module._async_session_factory = build_session_factory(test_engine)
    services_module.set_llm_provider(fake_llm)
    services_module.set_admission_queue(admission_queue)

    yield create_application()

    # Cleanup
    db_module._engine = None
    db_module._async_session_factory = None
    services_module.set_llm_provider(None)
    services_module.set_admission_queue(None)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def seeded_analyses(test_engine: AsyncEngine) -> list[AnalysisRecord]:
    """Store three analyses, oldest first."""
    records = [
        make_record(topics=["climate policy", "energy", "economics"], minutes=0),
        make_record(topics=["Climate Science", "oceans", "research"], minutes=1),
        make_record(topics=["football", "sports", "league"], minutes=2),
    ]
    async with build_session_factory(test_engine)() as session:
        storage = AnalysisStorageService(session)
        for record in records:
            await storage.save(record)
    return records
