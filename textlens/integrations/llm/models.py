"""LLM provider response models."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Sentiment(str, Enum):
    """Overall emotional tone of a text."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ExtractedMetadata(BaseModel):
    """Metadata the LLM extracts from a text.

    Keywords are not part of this model; they are computed locally.
    """

    title: str | None = Field(None, description="Title, if the text has one")
    topics: list[str] = Field(
        ..., min_length=3, max_length=3, description="Exactly three key topics"
    )
    sentiment: Sentiment = Field(..., description="Overall sentiment")

    @field_validator("title", mode="before")
    @classmethod
    def blank_title_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("topics")
    @classmethod
    def topics_not_blank(cls, value: list[str]) -> list[str]:
        cleaned = [topic.strip() for topic in value]
        if any(not topic for topic in cleaned):
            raise ValueError("topics must be non-empty strings")
        return cleaned
