"""Analysis Storage Service.

Responsible for:
- Persisting completed analyses together with their topics
- Loading a single analysis by ID
- Topic substring search, newest first

Rows are converted to immutable AnalysisRecord values on the way out so that
no ORM object escapes the service.

Usage:
    storage = AnalysisStorageService(db)

    await storage.save(record)
    record = await storage.get(analysis_id)
    records = await storage.search_by_topic("climate", limit=10)
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from textlens.core.logging import get_logger
from textlens.core.metrics import record_analysis_stored
from textlens.models import Analysis, AnalysisTopic, as_utc
from textlens.schemas.analysis import AnalysisMetadata, AnalysisRecord

from .exceptions import AnalysisNotFoundError, AnalysisPersistenceError

logger = get_logger(__name__)

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def to_record(row: Analysis) -> AnalysisRecord:
    """Convert an Analysis row to its API record."""
    return AnalysisRecord(
        id=row.id,
        text=row.text,
        summary=row.summary,
        metadata=AnalysisMetadata(
            title=row.title,
            topics=[t.topic for t in row.topics],
            sentiment=row.sentiment,
            keywords=list(row.keywords or []),
        ),
        created_at=as_utc(row.created_at),
    )


class AnalysisStorageService:
    """Service for reading and writing stored analyses."""

    def __init__(self, db: AsyncSession) -> None:
        """Initialize storage service.

        Args:
            db: Database session (dependency injected)
        """
        self._db = db

    async def save(self, record: AnalysisRecord) -> None:
        """Insert ``record`` and its topics and commit.

        Raises:
            AnalysisPersistenceError: The insert or commit failed
        """
        metadata = record.metadata
        row = Analysis(
            id=record.id,
            text=record.text,
            summary=record.summary,
            title=metadata.title,
            sentiment=metadata.sentiment,
            keywords=list(metadata.keywords),
            created_at=record.created_at,
            topics=[
                AnalysisTopic(position=position, topic=topic)
                for position, topic in enumerate(metadata.topics)
            ],
        )

        try:
            self._db.add(row)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(
                "Failed to store analysis",
                analysis_id=str(record.id),
                error=str(e),
            )
            raise AnalysisPersistenceError(analysis_id=record.id, cause=e) from e

        record_analysis_stored(metadata.sentiment.value)
        logger.info(
            "Analysis stored",
            analysis_id=str(record.id),
            sentiment=metadata.sentiment.value,
            topics=metadata.topics,
        )

    async def get(self, analysis_id: UUID) -> AnalysisRecord:
        """Load one analysis.

        Raises:
            AnalysisNotFoundError: No analysis has this ID
        """
        row = await self._db.get(Analysis, analysis_id)
        if row is None:
            raise AnalysisNotFoundError(analysis_id)
        return to_record(row)

    async def search_by_topic(self, term: str, limit: int) -> list[AnalysisRecord]:
        """Analyses with any topic containing ``term``, case-insensitively.

        Results are ordered newest first; ties on ``created_at`` fall back to
        ID order so that paging is stable.
        """
        pattern = f"%{escape_like(term.lower())}%"
        matching_ids = select(AnalysisTopic.analysis_id).where(
            func.lower(AnalysisTopic.topic).like(pattern, escape=LIKE_ESCAPE)
        )
        stmt = (
            select(Analysis)
            .where(Analysis.id.in_(matching_ids))
            .order_by(Analysis.created_at.desc(), Analysis.id)
            .limit(limit)
        )

        result = await self._db.execute(stmt)
        records = [to_record(row) for row in result.scalars().all()]

        logger.debug(
            "Topic search executed",
            term=term,
            limit=limit,
            result_count=len(records),
        )
        return records
