"""Keyword management endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from starlette.requests import Request
import structlog

from trend_monitor.api.auth import verify_api_key
from trend_monitor.api.dependencies import get_keyword_cache, get_keywords_repository
from trend_monitor.api.models import (
    CreateKeywordRequest,
    ErrorResponse,
    KeywordItem,
    KeywordsListResponse,
    UpdateKeywordRequest,
)
from trend_monitor.api.rate_limit import limiter, read_limit, write_limit
from trend_monitor.keywords.repository import (
    KeywordConflictError,
    KeywordsRepository,
    KeywordValidationError,
)
from trend_monitor.keywords.schemas import Keyword, KeywordStatus
from trend_monitor.matching.cache import KeywordCache

logger = structlog.get_logger(__name__)
router = APIRouter()


def _keyword_to_item(k: Keyword) -> KeywordItem:
    return KeywordItem(
        id=k.id,
        name=k.name,
        aliases=k.aliases,
        tags=k.tags,
        status=k.status,
        created_at=k.created_at,
        updated_at=k.updated_at,
    )


async def _invalidate(cache: KeywordCache) -> None:
    """Drop the matcher's cached keyword set after a write."""
    try:
        await cache.invalidate()
    except Exception as e:
        logger.warning("keyword_cache_invalidate_failed", error=str(e))


@router.get(
    "/keywords",
    response_model=KeywordsListResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="List keywords",
)
@limiter.limit(read_limit)
async def list_keywords(
    request: Request,
    status_filter: KeywordStatus | None = Query(default=None, alias="status"),
    tag: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    api_key: str = Depends(verify_api_key),
    repo: KeywordsRepository = Depends(get_keywords_repository),
) -> KeywordsListResponse:
    try:
        keywords = await repo.list_keywords(
            status=status_filter, tag=tag, limit=limit, offset=offset
        )
        return KeywordsListResponse(
            keywords=[_keyword_to_item(k) for k in keywords],
            total=len(keywords),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("list_keywords_failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to list keywords")


@router.post(
    "/keywords",
    response_model=KeywordItem,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create a keyword",
)
@limiter.limit(write_limit)
async def create_keyword(
    request: Request,
    body: CreateKeywordRequest,
    api_key: str = Depends(verify_api_key),
    repo: KeywordsRepository = Depends(get_keywords_repository),
    cache: KeywordCache = Depends(get_keyword_cache),
) -> KeywordItem:
    try:
        keyword = await repo.create(body.name, aliases=body.aliases, tags=body.tags)
    except KeywordValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except KeywordConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error("create_keyword_failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create keyword")

    await _invalidate(cache)
    return _keyword_to_item(keyword)


@router.get(
    "/keywords/{keyword_id}",
    response_model=KeywordItem,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get a keyword",
)
@limiter.limit(read_limit)
async def get_keyword(
    request: Request,
    keyword_id: str,
    api_key: str = Depends(verify_api_key),
    repo: KeywordsRepository = Depends(get_keywords_repository),
) -> KeywordItem:
    keyword = await repo.get_by_id(keyword_id)
    if keyword is None:
        raise HTTPException(status_code=404, detail="Keyword not found")
    return _keyword_to_item(keyword)


@router.put(
    "/keywords/{keyword_id}",
    response_model=KeywordItem,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update a keyword",
)
@limiter.limit(write_limit)
async def update_keyword(
    request: Request,
    keyword_id: str,
    body: UpdateKeywordRequest,
    api_key: str = Depends(verify_api_key),
    repo: KeywordsRepository = Depends(get_keywords_repository),
    cache: KeywordCache = Depends(get_keyword_cache),
) -> KeywordItem:
    try:
        keyword = await repo.update(
            keyword_id,
            name=body.name,
            aliases=body.aliases,
            tags=body.tags,
            status=body.status,
        )
    except KeywordValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except KeywordConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error("update_keyword_failed", keyword_id=keyword_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update keyword")

    if keyword is None:
        raise HTTPException(status_code=404, detail="Keyword not found")

    await _invalidate(cache)
    return _keyword_to_item(keyword)


@router.delete(
    "/keywords/{keyword_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Archive a keyword",
)
@limiter.limit(write_limit)
async def delete_keyword(
    request: Request,
    keyword_id: str,
    api_key: str = Depends(verify_api_key),
    repo: KeywordsRepository = Depends(get_keywords_repository),
    cache: KeywordCache = Depends(get_keyword_cache),
) -> Response:
    archived = await repo.archive(keyword_id)
    if not archived:
        raise HTTPException(status_code=404, detail="Keyword not found")

    await _invalidate(cache)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
