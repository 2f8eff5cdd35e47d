"""Data models for daily aggregation."""

from dataclasses import dataclass, field
from datetime import date


@dataclass
class DailyAggregate:
    """Mentions of one keyword from one source on one UTC day."""

    id: str
    date: date
    keyword_id: str
    source: str
    mentions_count: int


@dataclass(frozen=True)
class AggregateStat:
    """A freshly computed count, ready to be upserted."""

    date: date
    keyword_id: str
    source: str
    count: int


@dataclass
class AggregationSummary:
    dates_processed: list[date] = field(default_factory=list)
    total_aggregates: int = 0
