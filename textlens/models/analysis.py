"""Analysis models.

An Analysis is the persisted result of one POST /analyze call: the input
text, its summary and the extracted metadata. Topics live in their own
table so that topic search is an indexed lookup instead of a scan over a
JSON column.

Indexes:
- Primary key on analyses.id
- Index on analyses.created_at for newest-first ordering
- Index on analysis_topics.analysis_id for the join back to the analysis
- Index on analysis_topics.topic for topic search
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from textlens.integrations.llm import Sentiment
from textlens.models.base import Base, generate_uuid, utcnow


class Analysis(Base):
    """Stored analysis.

    Rows are written once and never updated.
    """

    __tablename__ = "analyses"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=generate_uuid,
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)

    summary: Mapped[str] = mapped_column(Text, nullable=False)

    title: Mapped[str | None] = mapped_column(String(500), nullable=True)

    sentiment: Mapped[Sentiment] = mapped_column(
        Enum(
            Sentiment,
            name="sentiment",
            native_enum=False,
            length=16,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )

    # Keyword list (0..3 entries) from the local heuristic
    keywords: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    topics: Mapped[list["AnalysisTopic"]] = relationship(
        "AnalysisTopic",
        back_populates="analysis",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="AnalysisTopic.position",
    )

    def __repr__(self) -> str:
        return f"<Analysis(id={self.id}, sentiment={self.sentiment})>"


class AnalysisTopic(Base):
    """One of the three topics of an analysis, in original order."""

    __tablename__ = "analysis_topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    analysis_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("analyses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position: Mapped[int] = mapped_column(Integer, nullable=False)

    topic: Mapped[str] = mapped_column(String(500), nullable=False, index=True)

    analysis: Mapped[Analysis] = relationship(
        "Analysis",
        back_populates="topics",
    )

    def __repr__(self) -> str:
        return f"<AnalysisTopic(analysis_id={self.analysis_id}, topic={self.topic!r})>"
