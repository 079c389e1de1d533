"""Topic search endpoint.

- GET /search?topic=<term>&limit=<n>

Parameter rules (blank topic, limit range, topic length) are enforced by
SearchService so that every rejected request uses the standard error format.
"""

import time
from typing import Annotated

from fastapi import APIRouter, Query

from textlens.core.logging import get_logger
from textlens.deps import SearchServiceDep
from textlens.schemas import AnalysisRecord, ErrorResponse

router = APIRouter(tags=["Search"])
logger = get_logger(__name__)


@router.get(
    "/search",
    response_model=list[AnalysisRecord],
    response_model_by_alias=True,
    summary="Search analyses by topic",
    description="Case-insensitive substring match against stored topics, newest first.",
    responses={
        400: {"model": ErrorResponse, "description": "Missing topic or invalid limit"},
        413: {"model": ErrorResponse, "description": "Topic too long"},
    },
)
async def search_analyses(
    search_service: SearchServiceDep,
    topic: Annotated[str | None, Query(description="Topic substring")] = None,
    limit: Annotated[int | None, Query(description="Maximum results")] = None,
) -> list[AnalysisRecord]:
    start = time.perf_counter()
    results = await search_service.search(topic, limit)

    logger.info(
        "Search request completed",
        topic=topic,
        limit=limit,
        result_count=len(results),
        response_time_ms=int((time.perf_counter() - start) * 1000),
    )
    return results
