"""textlens Domain Services.

Business logic layer for textlens.
Services orchestrate the LLM integration and storage and enforce domain rules.

Services in this package:
- AnalysisService: Summary, metadata and keyword orchestration
- AnalysisStorageService: Persistence and lookup of analyses
- SearchService: Validated topic search
- extract_keywords: Local keyword heuristic

Usage:
    from textlens.services import (
        AnalysisService, AnalysisStorageService, SearchService
    )

    analysis_service = AnalysisService(llm_provider)
    storage = AnalysisStorageService(db)
    search_service = SearchService(storage)

    record = await analysis_service.analyze(text)
    await storage.save(record)
    records = await search_service.search("climate", limit=5)

Exception Hierarchy:
    ServiceError (base)
    ├── TextValidationError
    ├── TextTooLongError
    ├── AnalysisError
    │   ├── AnalysisNotFoundError
    │   └── AnalysisPersistenceError
    └── SearchError
        ├── InvalidSearchQueryError
        └── SearchTermTooLongError
"""

from .analysis_service import AnalysisService, count_words, validate_text
from .exceptions import (
    AnalysisError,
    AnalysisNotFoundError,
    AnalysisPersistenceError,
    InvalidSearchQueryError,
    SearchError,
    SearchTermTooLongError,
    ServiceError,
    TextTooLongError,
    TextValidationError,
)
from .keyword_service import extract_keywords
from .search_service import SearchService
from .storage_service import AnalysisStorageService

__all__ = [
    # Services
    "AnalysisService",
    "AnalysisStorageService",
    "SearchService",
    "count_words",
    "extract_keywords",
    "validate_text",
    # Base exception
    "ServiceError",
    # Input exceptions
    "TextValidationError",
    "TextTooLongError",
    # Analysis exceptions
    "AnalysisError",
    "AnalysisNotFoundError",
    "AnalysisPersistenceError",
    # Search exceptions
    "SearchError",
    "InvalidSearchQueryError",
    "SearchTermTooLongError",
]
