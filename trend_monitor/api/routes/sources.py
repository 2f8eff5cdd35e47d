"""Source configuration endpoints: CRUD, toggle and feed validation."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from starlette.requests import Request
import structlog

from trend_monitor.api.auth import verify_api_key
from trend_monitor.api.dependencies import get_feed_validator, get_sources_repository
from trend_monitor.api.models import (
    CreateSourceRequest,
    ErrorResponse,
    FeedConfigItem,
    SourceItem,
    SourcesListResponse,
    UpdateSourceRequest,
    ValidateFeedRequest,
    ValidateFeedResponse,
)
from trend_monitor.api.rate_limit import limiter, read_limit, write_limit
from trend_monitor.sources.repository import SourceConfigRepository, SourceValidationError
from trend_monitor.sources.schemas import SourceConfig, health_status
from trend_monitor.sources.validator import FeedValidator

logger = structlog.get_logger(__name__)
router = APIRouter()


def _source_to_item(s: SourceConfig) -> SourceItem:
    return SourceItem(
        id=s.id,
        type=s.type,
        config=FeedConfigItem(**asdict(s.config)),
        enabled=s.enabled,
        created_at=s.created_at,
        updated_at=s.updated_at,
        last_fetch_at=s.last_fetch_at,
        last_success_at=s.last_success_at,
        last_error_at=s.last_error_at,
        last_error_message=s.last_error_message,
        consecutive_failures=s.consecutive_failures,
        deleted_at=s.deleted_at,
        health=health_status(s),
    )


@router.get(
    "/sources",
    response_model=SourcesListResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="List sources",
)
@limiter.limit(read_limit)
async def list_sources(
    request: Request,
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
    api_key: str = Depends(verify_api_key),
    repo: SourceConfigRepository = Depends(get_sources_repository),
) -> SourcesListResponse:
    try:
        sources = await repo.list_sources(include_deleted=include_deleted)
        return SourcesListResponse(sources=[_source_to_item(s) for s in sources])
    except HTTPException:
        raise
    except Exception as e:
        logger.error("list_sources_failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to list sources")


@router.post(
    "/sources/validate",
    response_model=ValidateFeedResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Fetch and parse a feed URL without saving it",
)
@limiter.limit(write_limit)
async def validate_source(
    request: Request,
    body: ValidateFeedRequest,
    api_key: str = Depends(verify_api_key),
    validator: FeedValidator = Depends(get_feed_validator),
) -> ValidateFeedResponse:
    result = await validator.validate(body.url, body.custom_user_agent)
    return ValidateFeedResponse.model_validate(asdict(result))


@router.post(
    "/sources",
    response_model=SourceItem,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Create a source",
)
@limiter.limit(write_limit)
async def create_source(
    request: Request,
    body: CreateSourceRequest,
    api_key: str = Depends(verify_api_key),
    repo: SourceConfigRepository = Depends(get_sources_repository),
) -> SourceItem:
    try:
        source = await repo.create(
            url=body.url,
            name=body.name,
            type=body.type,
            custom_user_agent=body.custom_user_agent,
            feed_title=body.feed_title,
            feed_description=body.feed_description,
        )
    except SourceValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("create_source_failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create source")

    return _source_to_item(source)


@router.get(
    "/sources/{source_id}",
    response_model=SourceItem,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get a source",
)
@limiter.limit(read_limit)
async def get_source(
    request: Request,
    source_id: str,
    api_key: str = Depends(verify_api_key),
    repo: SourceConfigRepository = Depends(get_sources_repository),
) -> SourceItem:
    source = await repo.get_by_id(source_id)
    if source is None:
        raise HTTPException(status_code=404, detail="Source not found")
    return _source_to_item(source)


@router.put(
    "/sources/{source_id}",
    response_model=SourceItem,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Update a source",
)
@limiter.limit(write_limit)
async def update_source(
    request: Request,
    source_id: str,
    body: UpdateSourceRequest,
    api_key: str = Depends(verify_api_key),
    repo: SourceConfigRepository = Depends(get_sources_repository),
) -> SourceItem:
    try:
        source = await repo.update(source_id, **body.model_dump(exclude_unset=True))
    except SourceValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("update_source_failed", source_id=source_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update source")

    if source is None:
        raise HTTPException(status_code=404, detail="Source not found")
    return _source_to_item(source)


@router.delete(
    "/sources/{source_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Soft-delete a source",
)
@limiter.limit(write_limit)
async def delete_source(
    request: Request,
    source_id: str,
    api_key: str = Depends(verify_api_key),
    repo: SourceConfigRepository = Depends(get_sources_repository),
) -> Response:
    existing = await repo.get_by_id(source_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Source not found")

    await repo.soft_delete(source_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/sources/{source_id}/toggle",
    response_model=SourceItem,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Enable or disable a source",
)
@limiter.limit(write_limit)
async def toggle_source(
    request: Request,
    source_id: str,
    api_key: str = Depends(verify_api_key),
    repo: SourceConfigRepository = Depends(get_sources_repository),
) -> SourceItem:
    source = await repo.toggle(source_id)
    if source is None:
        raise HTTPException(status_code=404, detail="Source not found")
    return _source_to_item(source)
