"""Database repository for the daily_aggregates table."""

import logging
import uuid
from datetime import date

from trend_monitor.aggregation.schemas import AggregateStat, DailyAggregate
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS daily_aggregates (
    id              TEXT PRIMARY KEY,
    date            DATE NOT NULL,
    keyword_id      TEXT NOT NULL,
    source          TEXT NOT NULL CHECK (source IN ('reddit', 'x', 'feed')),
    mentions_count  INTEGER NOT NULL DEFAULT 0,
    UNIQUE (date, keyword_id, source)
);

CREATE INDEX IF NOT EXISTS idx_daily_aggregates_keyword_date
    ON daily_aggregates(keyword_id, date);
"""

# Days are UTC calendar days of the mention's origin timestamp
_PENDING_DATES_SQL = """
SELECT day FROM (
    SELECT DISTINCT (created_at AT TIME ZONE 'UTC')::date AS day
    FROM mentions
    WHERE (created_at AT TIME ZONE 'UTC')::date
          >= (NOW() AT TIME ZONE 'UTC')::date - $1::int
    EXCEPT
    SELECT date FROM daily_aggregates
) pending
ORDER BY day
"""

# A mention matching N keywords counts once in each of N groups
_STATS_FOR_DATE_SQL = """
SELECT kw.keyword_id, m.source, COUNT(DISTINCT m.id) AS count
FROM mentions m
CROSS JOIN LATERAL unnest(m.matched_keywords) AS kw(keyword_id)
WHERE (m.created_at AT TIME ZONE 'UTC')::date = $1
GROUP BY kw.keyword_id, m.source
ORDER BY kw.keyword_id, m.source
"""

# Counts are overwritten with the recomputed value, never incremented
_BULK_UPSERT_SQL = """
INSERT INTO daily_aggregates (id, date, keyword_id, source, mentions_count)
SELECT * FROM unnest(
    $1::text[], $2::date[], $3::text[], $4::text[], $5::int[]
)
ON CONFLICT (date, keyword_id, source) DO UPDATE SET
    mentions_count = EXCLUDED.mentions_count
"""


def _record_to_aggregate(record) -> DailyAggregate:
    return DailyAggregate(
        id=record["id"],
        date=record["date"],
        keyword_id=record["keyword_id"],
        source=record["source"],
        mentions_count=record["mentions_count"],
    )


class AggregationRepository:
    """Reads mentions and writes daily aggregate rows."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the daily_aggregates table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Daily aggregates table ensured")

    async def get_pending_dates(self, lookback_days: int) -> list[date]:
        """Dates within the lookback window with mentions but no aggregates."""
        rows = await self._db.fetch(_PENDING_DATES_SQL, lookback_days)
        return [r["day"] for r in rows]

    async def get_stats_for_date(self, day: date) -> list[AggregateStat]:
        """Per (keyword_id, source) mention counts for one day."""
        rows = await self._db.fetch(_STATS_FOR_DATE_SQL, day)
        return [
            AggregateStat(
                date=day,
                keyword_id=r["keyword_id"],
                source=r["source"],
                count=r["count"],
            )
            for r in rows
        ]

    async def upsert_daily_aggregates(self, stats: list[AggregateStat]) -> int:
        """Insert or overwrite aggregate rows. Returns the number of rows sent."""
        if not stats:
            return 0

        await self._db.execute(
            _BULK_UPSERT_SQL,
            [str(uuid.uuid4()) for _ in stats],
            [s.date for s in stats],
            [s.keyword_id for s in stats],
            [s.source for s in stats],
            [s.count for s in stats],
        )
        return len(stats)

    async def list_for_date(self, day: date) -> list[DailyAggregate]:
        rows = await self._db.fetch(
            """
            SELECT * FROM daily_aggregates
            WHERE date = $1
            ORDER BY keyword_id, source
            """,
            day,
        )
        return [_record_to_aggregate(r) for r in rows]
