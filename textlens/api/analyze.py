"""Analysis submission endpoint.

- POST /analyze

The handler validates the text, then submits one work unit (analyze and
persist) to the admission queue. No business logic is implemented here.
"""

from fastapi import APIRouter

from textlens.core.config import get_settings
from textlens.core.logging import get_logger
from textlens.deps import AdmissionQueueDep, AnalysisServiceDep, StorageServiceDep
from textlens.schemas import AnalysisRecord, AnalysisRequest, ErrorResponse
from textlens.services import validate_text

router = APIRouter(tags=["Analysis"])
logger = get_logger(__name__)


@router.post(
    "/analyze",
    response_model=AnalysisRecord,
    response_model_by_alias=True,
    summary="Analyze text",
    description=(
        "Summarize the text, extract title, topics, sentiment and keywords, "
        "and store the result."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing or blank text"},
        413: {"model": ErrorResponse, "description": "Text too long"},
        500: {"model": ErrorResponse, "description": "Malformed LLM response or storage failure"},
        503: {"model": ErrorResponse, "description": "At capacity or LLM unavailable"},
        504: {"model": ErrorResponse, "description": "LLM timeout"},
    },
)
async def analyze_text(
    body: AnalysisRequest,
    queue: AdmissionQueueDep,
    analysis_service: AnalysisServiceDep,
    storage: StorageServiceDep,
) -> AnalysisRecord:
    text = validate_text(body.text, max_length=get_settings().max_text_length)

    async def work() -> AnalysisRecord:
        logger.info("Processing analysis request", text_length=len(text))
        record = await analysis_service.analyze(text)
        await storage.save(record)
        return record

    record = await queue.submit(work)

    logger.info("Analysis request completed", analysis_id=str(record.id))
    return record
