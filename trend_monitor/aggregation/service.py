"""
Daily aggregation job.

Rolls mentions up into (date, keyword, source) counts. Each pending date
is recomputed from the mentions table and upserted, so re-running is
safe and a second run with nothing pending does nothing.
"""

from datetime import date

import structlog

from trend_monitor.aggregation.repository import AggregationRepository
from trend_monitor.aggregation.schemas import AggregationSummary
from trend_monitor.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


class AggregationService:
    """
    Usage:
        service = AggregationService(AggregationRepository(db))
        summary = await service.run_aggregation(lookback_days=7)
    """

    def __init__(self, repository: AggregationRepository):
        self._repo = repository
        self._metrics = get_metrics()

    async def aggregate_date(self, day: date) -> int:
        """Recompute and upsert one day's aggregates. Returns the row count."""
        stats = await self._repo.get_stats_for_date(day)
        await self._repo.upsert_daily_aggregates(stats)
        self._metrics.aggregates_written.inc(len(stats))
        return len(stats)

    async def run_aggregation(self, lookback_days: int = 7) -> AggregationSummary:
        pending = await self._repo.get_pending_dates(lookback_days)
        summary = AggregationSummary()

        for day in pending:
            count = await self.aggregate_date(day)
            summary.dates_processed.append(day)
            summary.total_aggregates += count
            logger.info("Aggregated date", date=day.isoformat(), aggregates=count)

        logger.info(
            "Aggregation run complete",
            lookback_days=lookback_days,
            dates=len(summary.dates_processed),
            total_aggregates=summary.total_aggregates,
        )
        return summary
