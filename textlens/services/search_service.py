"""Topic search service.

Validates search parameters and delegates the query to the storage layer.
"""

from textlens.core.logging import get_logger
from textlens.schemas.analysis import AnalysisRecord

from .exceptions import InvalidSearchQueryError, SearchTermTooLongError
from .storage_service import AnalysisStorageService

logger = get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 100
MAX_TOPIC_LENGTH = 200


class SearchService:
    """Search stored analyses by topic substring."""

    def __init__(
        self,
        storage: AnalysisStorageService,
        *,
        default_limit: int = DEFAULT_SEARCH_LIMIT,
        max_limit: int = MAX_SEARCH_LIMIT,
        max_topic_length: int = MAX_TOPIC_LENGTH,
    ) -> None:
        self._storage = storage
        self._default_limit = min(default_limit, max_limit)
        self._max_limit = max_limit
        self._max_topic_length = max_topic_length

    async def search(
        self, topic: str | None, limit: int | None = None
    ) -> list[AnalysisRecord]:
        """Return analyses whose topics contain ``topic``, newest first.

        Args:
            topic: Search term, trimmed before matching
            limit: Maximum results; ``None`` uses the default

        Raises:
            InvalidSearchQueryError: Blank topic or limit out of range
            SearchTermTooLongError: Topic longer than the configured maximum
        """
        term = (topic or "").strip()
        if not term:
            raise InvalidSearchQueryError(
                "Topic query parameter is required", parameter="topic"
            )
        if len(term) > self._max_topic_length:
            raise SearchTermTooLongError(len(term), self._max_topic_length)

        if limit is None:
            limit = self._default_limit
        elif isinstance(limit, bool) or limit < 1 or limit > self._max_limit:
            raise InvalidSearchQueryError(
                f"Limit must be an integer between 1 and {self._max_limit}",
                parameter="limit",
            )

        results = await self._storage.search_by_topic(term, limit)

        logger.debug(
            "Search completed",
            topic=term,
            limit=limit,
            result_count=len(results),
        )
        return results
