"""Unit tests for AnalysisStorageService against a temporary SQLite database."""

import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from textlens.integrations.llm import Sentiment
from textlens.models import AnalysisTopic
from textlens.services import (
    AnalysisNotFoundError,
    AnalysisPersistenceError,
    AnalysisStorageService,
)
from textlens.services.storage_service import escape_like
from tests.conftest import make_record


class TestEscapeLike:
    def test_escapes_wildcards(self):
        assert escape_like("100%_done\\") == "100\\%\\_done\\\\"

    def test_plain_text_unchanged(self):
        assert escape_like("climate") == "climate"


class TestSaveAndGet:
    """Tests for save and get."""

    @pytest.mark.asyncio
    async def test_round_trip(self, db_session: AsyncSession):
        """A saved record is returned unchanged by get."""
        storage = AnalysisStorageService(db_session)
        record = make_record(
            topics=["Climate", "Policy", "Energy"],
            sentiment=Sentiment.NEGATIVE,
            title=None,
            keywords=["policy", "energy"],
        )

        await storage.save(record)
        loaded = await storage.get(record.id)

        assert loaded == record
        assert loaded.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_topics_stored_in_order(self, db_session: AsyncSession):
        storage = AnalysisStorageService(db_session)
        record = make_record(topics=["zeta", "alpha", "mu"])
        await storage.save(record)

        result = await db_session.execute(
            select(AnalysisTopic.topic)
            .where(AnalysisTopic.analysis_id == record.id)
            .order_by(AnalysisTopic.position)
        )
        assert list(result.scalars()) == ["zeta", "alpha", "mu"]

    @pytest.mark.asyncio
    async def test_get_missing(self, db_session: AsyncSession):
        storage = AnalysisStorageService(db_session)
        missing = uuid.uuid4()

        with pytest.raises(AnalysisNotFoundError) as exc_info:
            await storage.get(missing)
        assert exc_info.value.details == {"analysis_id": str(missing)}

    @pytest.mark.asyncio
    async def test_duplicate_id_is_persistence_error(self, db_session: AsyncSession):
        """A primary key clash surfaces as AnalysisPersistenceError."""
        record = make_record()
        await AnalysisStorageService(db_session).save(record)
        db_session.expunge_all()

        with pytest.raises(AnalysisPersistenceError) as exc_info:
            await AnalysisStorageService(db_session).save(record)
        assert exc_info.value.analysis_id == record.id

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self):
        """Database errors on commit are wrapped and the session rolled back."""
        session = AsyncMock(spec=AsyncSession)
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))

        with pytest.raises(AnalysisPersistenceError) as exc_info:
            await AnalysisStorageService(session).save(make_record())

        session.rollback.assert_awaited_once()
        assert exc_info.value.details["cause"] == "OperationalError"


class TestSearchByTopic:
    """Tests for search_by_topic."""

    @pytest.mark.asyncio
    async def test_case_insensitive_substring(self, db_session: AsyncSession):
        storage = AnalysisStorageService(db_session)
        match = make_record(topics=["Renewable Energy", "policy", "wind"])
        other = make_record(topics=["sports", "football", "league"], minutes=1)
        await storage.save(match)
        await storage.save(other)

        results = await storage.search_by_topic("ENERGY", limit=10)
        assert [r.id for r in results] == [match.id]

    @pytest.mark.asyncio
    async def test_newest_first_with_limit(self, db_session: AsyncSession):
        storage = AnalysisStorageService(db_session)
        records = [make_record(topics=["tech", "ai", "chips"], minutes=m) for m in range(5)]
        for record in records:
            await storage.save(record)

        results = await storage.search_by_topic("tech", limit=3)
        assert [r.id for r in results] == [records[4].id, records[3].id, records[2].id]

    @pytest.mark.asyncio
    async def test_one_result_per_analysis(self, db_session: AsyncSession):
        """An analysis matching on several topics is returned once."""
        storage = AnalysisStorageService(db_session)
        record = make_record(topics=["data science", "big data", "data"])
        await storage.save(record)

        results = await storage.search_by_topic("data", limit=10)
        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_wildcards_match_literally(self, db_session: AsyncSession):
        storage = AnalysisStorageService(db_session)
        literal = make_record(topics=["100% renewable", "grid", "solar"])
        plain = make_record(topics=["100 percent", "grid", "solar"], minutes=1)
        await storage.save(literal)
        await storage.save(plain)

        results = await storage.search_by_topic("100%", limit=10)
        assert [r.id for r in results] == [literal.id]

        assert await storage.search_by_topic("_", limit=10) == []

    @pytest.mark.asyncio
    async def test_no_match(self, db_session: AsyncSession):
        storage = AnalysisStorageService(db_session)
        await storage.save(make_record())
        assert await storage.search_by_topic("nothing-like-this", limit=10) == []
