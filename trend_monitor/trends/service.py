"""
Trend statistics over daily aggregates.

Growth compares a window with the equal-length window immediately before
it. A keyword is emerging when it was nearly absent before and is now
clearly present.
"""

from datetime import date, datetime, timedelta, timezone

import structlog

from trend_monitor.trends.repository import TrendsRepository
from trend_monitor.trends.schemas import KeywordTrend, TrendKeyword, TrendsOverview

logger = structlog.get_logger(__name__)

TOP_KEYWORDS_LIMIT = 10
OVERVIEW_WINDOW_DAYS = 7
KEYWORD_TREND_WINDOW_DAYS = 30

# Emerging: fewer than EMERGING_MIN_PREVIOUS before, at least EMERGING_MIN_CURRENT now
EMERGING_MIN_PREVIOUS = 3
EMERGING_MIN_CURRENT = 10


def growth_rate(current: int, previous: int) -> float:
    """Percentage change; 100.0 when there is no previous activity."""
    if previous <= 0:
        return 100.0
    return (current - previous) / previous * 100


def is_emerging(current: int, previous: int) -> bool:
    return previous < EMERGING_MIN_PREVIOUS and current >= EMERGING_MIN_CURRENT


def previous_window(from_date: date, to_date: date) -> tuple[date, date]:
    """The equal-length window ending the day before from_date."""
    length = (to_date - from_date).days + 1
    prev_to = from_date - timedelta(days=1)
    return prev_to - timedelta(days=length - 1), prev_to


def _today() -> date:
    return datetime.now(timezone.utc).date()


class TrendsService:
    """
    Usage:
        service = TrendsService(TrendsRepository(db))
        overview = await service.get_overview()
    """

    def __init__(self, repository: TrendsRepository):
        self._repo = repository

    async def get_overview(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> TrendsOverview:
        to_date = to_date or _today()
        from_date = from_date or to_date - timedelta(days=OVERVIEW_WINDOW_DAYS)

        top = await self._repo.top_keywords(from_date, to_date, TOP_KEYWORDS_LIMIT)
        prev_from, prev_to = previous_window(from_date, to_date)
        previous = await self._repo.keyword_totals(
            [keyword_id for keyword_id, _, _ in top], prev_from, prev_to
        )

        top_keywords = []
        for keyword_id, name, current in top:
            prev = previous.get(keyword_id, 0)
            top_keywords.append(
                TrendKeyword(
                    keyword_id=keyword_id,
                    name=name,
                    current_period=current,
                    previous_period=prev,
                    growth_rate=growth_rate(current, prev),
                    is_emerging=is_emerging(current, prev),
                )
            )

        return TrendsOverview(
            top_keywords=top_keywords,
            emerging_keywords=[k for k in top_keywords if k.is_emerging],
            total_mentions=sum(k.current_period for k in top_keywords),
            source_breakdown=await self._repo.source_breakdown(from_date, to_date),
        )

    async def get_keyword_trend(
        self,
        keyword_id: str,
        from_date: date | None = None,
        to_date: date | None = None,
        source: str | None = None,
    ) -> KeywordTrend | None:
        """Daily series for one keyword, or None if the keyword does not exist."""
        name = await self._repo.keyword_name(keyword_id)
        if name is None:
            return None

        to_date = to_date or _today()
        from_date = from_date or to_date - timedelta(days=KEYWORD_TREND_WINDOW_DAYS)

        series = await self._repo.keyword_series(keyword_id, from_date, to_date, source)
        total = sum(p.count for p in series)
        # Days with no mentions are absent and do not dilute the average
        day_count = len({p.date for p in series})

        return KeywordTrend(
            keyword_id=keyword_id,
            name=name,
            time_series=series,
            total_mentions=total,
            average_per_day=total / day_count if day_count else 0.0,
        )
