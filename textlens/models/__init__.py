"""SQLAlchemy models for textlens."""

from textlens.models.analysis import Analysis, AnalysisTopic
from textlens.models.base import Base, as_utc, generate_uuid, utcnow

__all__ = [
    # Base
    "Base",
    "as_utc",
    "generate_uuid",
    "utcnow",
    # Models
    "Analysis",
    "AnalysisTopic",
]
