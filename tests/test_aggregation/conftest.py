"""Shared fixtures for aggregation tests."""

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timezone

import pytest

from trend_monitor.aggregation.schemas import AggregateStat


@dataclass
class StoredMention:
    id: str
    source: str
    created_at: datetime
    matched_keywords: list[str]


class InMemoryAggregationRepository:
    """
    Mirrors AggregationRepository's queries over Python lists.

    Pending dates ignore the lookback window; every test date is recent
    enough for it not to matter.
    """

    def __init__(self, mentions: list[StoredMention]):
        self.mentions = mentions
        self.aggregates: dict[tuple[date, str, str], int] = {}
        self.upsert_calls = 0

    async def get_pending_dates(self, lookback_days: int) -> list[date]:
        mention_days = {m.created_at.astimezone(timezone.utc).date() for m in self.mentions}
        aggregated_days = {key[0] for key in self.aggregates}
        return sorted(mention_days - aggregated_days)

    async def get_stats_for_date(self, day: date) -> list[AggregateStat]:
        counts: Counter = Counter()
        for m in self.mentions:
            if m.created_at.astimezone(timezone.utc).date() != day:
                continue
            for keyword_id in set(m.matched_keywords):
                counts[(keyword_id, m.source)] += 1
        return [
            AggregateStat(date=day, keyword_id=k, source=s, count=c)
            for (k, s), c in sorted(counts.items())
        ]

    async def upsert_daily_aggregates(self, stats: list[AggregateStat]) -> int:
        self.upsert_calls += 1
        for s in stats:
            self.aggregates[(s.date, s.keyword_id, s.source)] = s.count
        return len(stats)


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2026, 1, day, hour, tzinfo=timezone.utc)


@pytest.fixture
def two_day_mentions() -> list[StoredMention]:
    """
    2026-01-20: k1 twice from reddit, k1+k2 once from x
    2026-01-21: k2 once from reddit
    """
    return [
        StoredMention("m1", "reddit", _at(20, 8), ["k1"]),
        StoredMention("m2", "reddit", _at(20, 9), ["k1"]),
        StoredMention("m3", "x", _at(20, 23), ["k1", "k2"]),
        StoredMention("m4", "reddit", _at(21, 0), ["k2"]),
    ]


@pytest.fixture
def fake_repo(two_day_mentions) -> InMemoryAggregationRepository:
    return InMemoryAggregationRepository(two_day_mentions)


@pytest.fixture
def empty_repo() -> InMemoryAggregationRepository:
    return InMemoryAggregationRepository([])
