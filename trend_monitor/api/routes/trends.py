"""Trend statistics endpoints."""

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.requests import Request
import structlog

from trend_monitor.api.auth import verify_api_key
from trend_monitor.api.dependencies import get_trends_service
from trend_monitor.api.models import (
    ErrorResponse,
    KeywordTrendResponse,
    SourceCountItem,
    TrendKeywordItem,
    TrendPointItem,
    TrendsOverviewResponse,
)
from trend_monitor.api.rate_limit import limiter, read_limit
from trend_monitor.mentions.schemas import SourceName
from trend_monitor.trends.schemas import TrendKeyword
from trend_monitor.trends.service import TrendsService

logger = structlog.get_logger(__name__)
router = APIRouter()


def _trend_keyword_to_item(k: TrendKeyword) -> TrendKeywordItem:
    return TrendKeywordItem(
        keyword_id=k.keyword_id,
        name=k.name,
        current_period=k.current_period,
        previous_period=k.previous_period,
        growth_rate=k.growth_rate,
        is_emerging=k.is_emerging,
    )


def _check_window(from_: dt.date | None, to: dt.date | None) -> None:
    if from_ and to and from_ > to:
        raise HTTPException(status_code=400, detail="'from' must not be after 'to'")


@router.get(
    "/trends/overview",
    response_model=TrendsOverviewResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Top and emerging keywords for a date window",
)
@limiter.limit(read_limit)
async def get_overview(
    request: Request,
    from_: dt.date | None = Query(default=None, alias="from"),
    to: dt.date | None = Query(default=None),
    api_key: str = Depends(verify_api_key),
    service: TrendsService = Depends(get_trends_service),
) -> TrendsOverviewResponse:
    _check_window(from_, to)
    try:
        overview = await service.get_overview(from_date=from_, to_date=to)
    except Exception as e:
        logger.error("get_overview_failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to compute overview")

    return TrendsOverviewResponse(
        top_keywords=[_trend_keyword_to_item(k) for k in overview.top_keywords],
        emerging_keywords=[_trend_keyword_to_item(k) for k in overview.emerging_keywords],
        total_mentions=overview.total_mentions,
        source_breakdown=[
            SourceCountItem(source=s.source, count=s.count)
            for s in overview.source_breakdown
        ],
    )


@router.get(
    "/trends/{keyword_id}",
    response_model=KeywordTrendResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Daily mention series for one keyword",
)
@limiter.limit(read_limit)
async def get_keyword_trend(
    request: Request,
    keyword_id: str,
    from_: dt.date | None = Query(default=None, alias="from"),
    to: dt.date | None = Query(default=None),
    source: SourceName | None = Query(default=None),
    api_key: str = Depends(verify_api_key),
    service: TrendsService = Depends(get_trends_service),
) -> KeywordTrendResponse:
    _check_window(from_, to)
    try:
        trend = await service.get_keyword_trend(
            keyword_id,
            from_date=from_,
            to_date=to,
            source=source.value if source else None,
        )
    except Exception as e:
        logger.error("get_keyword_trend_failed", keyword_id=keyword_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to compute keyword trend")

    if trend is None:
        raise HTTPException(status_code=404, detail="Keyword not found")

    return KeywordTrendResponse(
        keyword_id=trend.keyword_id,
        name=trend.name,
        time_series=[
            TrendPointItem(date=p.date, source=p.source, count=p.count)
            for p in trend.time_series
        ],
        total_mentions=trend.total_mentions,
        average_per_day=trend.average_per_day,
    )
