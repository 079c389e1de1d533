"""Stored analysis lookup endpoint.

- GET /analyses/{id}
"""

from uuid import UUID

from fastapi import APIRouter

from textlens.deps import StorageServiceDep
from textlens.schemas import AnalysisRecord, ErrorResponse

router = APIRouter(tags=["Analysis"])


@router.get(
    "/analyses/{analysis_id}",
    response_model=AnalysisRecord,
    response_model_by_alias=True,
    summary="Get analysis",
    responses={
        400: {"model": ErrorResponse, "description": "Malformed ID"},
        404: {"model": ErrorResponse, "description": "Analysis not found"},
    },
)
async def get_analysis(
    analysis_id: UUID,
    storage: StorageServiceDep,
) -> AnalysisRecord:
    return await storage.get(analysis_id)
