"""Pydantic schemas for the analysis and search APIs.

AnalysisRecord is both the domain result of an analysis and the response
body of POST /analyze, GET /analyses/{id} and GET /search. Records are
immutable once created.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from textlens.integrations.llm import Sentiment


class AnalysisRequest(BaseModel):
    """Request body for POST /analyze.

    Presence and length of ``text`` are checked by the analysis service so
    that a missing or blank value maps to 400 and an oversized one to 413.
    """

    text: str | None = Field(None, description="Text to analyze")


class AnalysisMetadata(BaseModel):
    """Structured metadata attached to an analysis."""

    model_config = ConfigDict(frozen=True)

    title: str | None = Field(None, description="Extracted title or null")
    topics: list[str] = Field(..., description="Exactly three key topics")
    sentiment: Sentiment = Field(..., description="Overall sentiment")
    keywords: list[str] = Field(
        default_factory=list, description="Zero to three frequent nouns"
    )


class AnalysisRecord(BaseModel):
    """A completed analysis."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: uuid.UUID = Field(..., description="Analysis UUID")
    text: str = Field(..., description="Original input text")
    summary: str = Field(..., description="One to two sentence summary")
    metadata: AnalysisMetadata = Field(..., description="Structured metadata")
    created_at: datetime = Field(
        ...,
        serialization_alias="createdAt",
        description="Creation timestamp (UTC)",
    )
