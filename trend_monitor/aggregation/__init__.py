"""Daily aggregation of mentions per keyword and source."""

from trend_monitor.aggregation.repository import AggregationRepository
from trend_monitor.aggregation.schemas import (
    AggregateStat,
    AggregationSummary,
    DailyAggregate,
)
from trend_monitor.aggregation.service import AggregationService

__all__ = [
    "AggregateStat",
    "AggregationRepository",
    "AggregationService",
    "AggregationSummary",
    "DailyAggregate",
]
