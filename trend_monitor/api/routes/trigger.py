"""Manual ingestion trigger endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from starlette.requests import Request
import structlog

from trend_monitor.api.auth import verify_api_key
from trend_monitor.api.dependencies import get_feed_processor, get_ingestion_queue
from trend_monitor.api.models import ErrorResponse, SourceRunItem, TriggerResponse
from trend_monitor.api.rate_limit import limiter, write_limit
from trend_monitor.ingestion.processor import FeedProcessor, ProcessResult
from trend_monitor.ingestion.queue import IngestionQueue
from trend_monitor.services.ingestion_service import publish_events

logger = structlog.get_logger(__name__)
router = APIRouter()


async def _respond(
    queue: IngestionQueue, results: list[ProcessResult]
) -> TriggerResponse:
    events = [event for r in results for event in r.events]
    published = await publish_events(queue, events)
    return TriggerResponse(
        sources=[SourceRunItem(**r.to_dict()) for r in results],
        events_published=published,
        sources_failed=sum(1 for r in results if not r.ok),
    )


@router.post(
    "/trigger/all",
    response_model=TriggerResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Ingest every enabled source now",
)
@limiter.limit(write_limit)
async def trigger_all(
    request: Request,
    api_key: str = Depends(verify_api_key),
    processor: FeedProcessor = Depends(get_feed_processor),
    queue: IngestionQueue = Depends(get_ingestion_queue),
) -> TriggerResponse:
    try:
        _, results = await processor.process_all_sources()
        return await _respond(queue, results)
    except Exception as e:
        logger.error("trigger_all_failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to run ingestion")


@router.post(
    "/trigger/{source_id}",
    response_model=TriggerResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Ingest one source now",
)
@limiter.limit(write_limit)
async def trigger_source(
    request: Request,
    source_id: str,
    api_key: str = Depends(verify_api_key),
    processor: FeedProcessor = Depends(get_feed_processor),
    queue: IngestionQueue = Depends(get_ingestion_queue),
) -> TriggerResponse:
    try:
        result = await processor.process_source(source_id)
        return await _respond(queue, [result])
    except Exception as e:
        logger.error("trigger_source_failed", source_id=source_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to run ingestion")
