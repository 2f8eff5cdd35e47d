"""Mention browsing endpoints."""

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.requests import Request
import structlog

from trend_monitor.api.auth import verify_api_key
from trend_monitor.api.dependencies import get_mentions_repository
from trend_monitor.api.models import ErrorResponse, MentionItem, MentionsListResponse
from trend_monitor.api.rate_limit import limiter, read_limit
from trend_monitor.mentions.repository import MentionsRepository
from trend_monitor.mentions.schemas import Mention, SourceName

logger = structlog.get_logger(__name__)
router = APIRouter()


def _mention_to_item(m: Mention) -> MentionItem:
    return MentionItem(
        id=m.id,
        source=m.source,
        source_id=m.source_id,
        title=m.title,
        content=m.content,
        url=m.url,
        author=m.author,
        created_at=m.created_at,
        fetched_at=m.fetched_at,
        matched_keywords=m.matched_keywords,
    )


@router.get(
    "/mentions",
    response_model=MentionsListResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="List mentions, newest first",
)
@limiter.limit(read_limit)
async def list_mentions(
    request: Request,
    keyword_id: str | None = Query(default=None, alias="keywordId"),
    source: SourceName | None = Query(default=None),
    from_: dt.datetime | None = Query(default=None, alias="from"),
    to: dt.datetime | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    api_key: str = Depends(verify_api_key),
    repo: MentionsRepository = Depends(get_mentions_repository),
) -> MentionsListResponse:
    try:
        mentions, total = await repo.list_mentions(
            keyword_id=keyword_id,
            source=source,
            from_date=from_,
            to_date=to,
            limit=limit,
            offset=offset,
        )
        return MentionsListResponse(
            mentions=[_mention_to_item(m) for m in mentions],
            total=total,
            limit=limit,
            offset=offset,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("list_mentions_failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to list mentions")


@router.get(
    "/mentions/{mention_id}",
    response_model=MentionItem,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get a mention",
)
@limiter.limit(read_limit)
async def get_mention(
    request: Request,
    mention_id: str,
    api_key: str = Depends(verify_api_key),
    repo: MentionsRepository = Depends(get_mentions_repository),
) -> MentionItem:
    mention = await repo.get_by_id(mention_id)
    if mention is None:
        raise HTTPException(status_code=404, detail="Mention not found")
    return _mention_to_item(mention)
