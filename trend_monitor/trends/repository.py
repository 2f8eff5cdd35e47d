"""Read-only trend queries over daily_aggregates."""

import logging
from datetime import date

from trend_monitor.storage.database import Database
from trend_monitor.trends.schemas import SourceCount, TrendPoint

logger = logging.getLogger(__name__)


class TrendsRepository:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def top_keywords(
        self, from_date: date, to_date: date, limit: int = 10
    ) -> list[tuple[str, str, int]]:
        """(keyword_id, name, total) ordered by total, highest first."""
        rows = await self._db.fetch(
            """
            SELECT k.id, k.name, SUM(da.mentions_count) AS total
            FROM daily_aggregates da
            JOIN keywords k ON da.keyword_id = k.id
            WHERE da.date >= $1 AND da.date <= $2
            GROUP BY k.id, k.name
            ORDER BY total DESC, k.name
            LIMIT $3
            """,
            from_date,
            to_date,
            limit,
        )
        return [(r["id"], r["name"], int(r["total"])) for r in rows]

    async def keyword_totals(
        self, keyword_ids: list[str], from_date: date, to_date: date
    ) -> dict[str, int]:
        """Summed counts per keyword over a window. Missing keywords are absent."""
        if not keyword_ids:
            return {}
        rows = await self._db.fetch(
            """
            SELECT keyword_id, SUM(mentions_count) AS total
            FROM daily_aggregates
            WHERE keyword_id = ANY($1::text[]) AND date >= $2 AND date <= $3
            GROUP BY keyword_id
            """,
            keyword_ids,
            from_date,
            to_date,
        )
        return {r["keyword_id"]: int(r["total"]) for r in rows}

    async def source_breakdown(self, from_date: date, to_date: date) -> list[SourceCount]:
        rows = await self._db.fetch(
            """
            SELECT source, SUM(mentions_count) AS count
            FROM daily_aggregates
            WHERE date >= $1 AND date <= $2
            GROUP BY source
            ORDER BY source
            """,
            from_date,
            to_date,
        )
        return [SourceCount(source=r["source"], count=int(r["count"])) for r in rows]

    async def keyword_series(
        self,
        keyword_id: str,
        from_date: date,
        to_date: date,
        source: str | None = None,
    ) -> list[TrendPoint]:
        """One point per (date, source), oldest first."""
        conditions = ["keyword_id = $1", "date >= $2", "date <= $3"]
        params: list = [keyword_id, from_date, to_date]

        if source:
            conditions.append("source = $4")
            params.append(source)

        rows = await self._db.fetch(
            f"""
            SELECT date, source, SUM(mentions_count) AS count
            FROM daily_aggregates
            WHERE {" AND ".join(conditions)}
            GROUP BY date, source
            ORDER BY date, source
            """,
            *params,
        )
        return [
            TrendPoint(date=r["date"], source=r["source"], count=int(r["count"]))
            for r in rows
        ]

    async def keyword_name(self, keyword_id: str) -> str | None:
        return await self._db.fetchval(
            "SELECT name FROM keywords WHERE id = $1", keyword_id
        )
