"""Database repository for the mentions table."""

import logging
import uuid
from datetime import datetime

from trend_monitor.mentions.schemas import Mention, SourceName
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS mentions (
    id                TEXT PRIMARY KEY,
    source            TEXT NOT NULL CHECK (source IN ('reddit', 'x', 'feed')),
    source_id         TEXT NOT NULL,
    title             TEXT,
    content           TEXT NOT NULL,
    url               TEXT NOT NULL,
    author            TEXT,
    created_at        TIMESTAMPTZ NOT NULL,
    fetched_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    matched_keywords  TEXT[] NOT NULL DEFAULT '{}',
    UNIQUE (source, source_id)
);

CREATE INDEX IF NOT EXISTS idx_mentions_created_at ON mentions(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_mentions_matched_keywords
    ON mentions USING GIN (matched_keywords);
"""

# ON CONFLICT DO NOTHING returns no row for a duplicate, which is how
# create_or_ignore tells the two cases apart.
_INSERT_SQL = """
INSERT INTO mentions (
    id, source, source_id, title, content, url, author,
    created_at, fetched_at, matched_keywords
)
VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
ON CONFLICT (source, source_id) DO NOTHING
RETURNING *
"""

MAX_LIST_LIMIT = 100


def _record_to_mention(record) -> Mention:
    """Convert an asyncpg Record to a Mention dataclass."""
    return Mention(
        id=record["id"],
        source=SourceName(record["source"]),
        source_id=record["source_id"],
        title=record["title"],
        content=record["content"],
        url=record["url"],
        author=record["author"],
        created_at=record["created_at"],
        fetched_at=record["fetched_at"],
        matched_keywords=list(record["matched_keywords"] or []),
    )


class MentionsRepository:
    """Insert and query operations for the mentions table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the mentions table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Mentions table ensured")

    async def create_or_ignore(
        self,
        source: SourceName | str,
        source_id: str,
        content: str,
        url: str,
        created_at: datetime,
        fetched_at: datetime,
        matched_keywords: list[str],
        title: str | None = None,
        author: str | None = None,
    ) -> Mention | None:
        """
        Insert a mention unless (source, source_id) already exists.

        Returns:
            The stored mention, or None if it was a duplicate
        """
        row = await self._db.fetchrow(
            _INSERT_SQL,
            str(uuid.uuid4()),
            SourceName(source).value,
            source_id,
            title,
            content,
            url,
            author,
            created_at,
            fetched_at,
            matched_keywords,
        )
        if row is None:
            logger.debug("Duplicate mention %s/%s ignored", source, source_id)
            return None
        return _record_to_mention(row)

    async def get_by_id(self, mention_id: str) -> Mention | None:
        """Fetch a single mention by id."""
        row = await self._db.fetchrow(
            "SELECT * FROM mentions WHERE id = $1", mention_id
        )
        return _record_to_mention(row) if row else None

    async def list_mentions(
        self,
        keyword_id: str | None = None,
        source: SourceName | str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Mention], int]:
        """
        List mentions newest first with optional filters.

        Returns:
            Tuple of (page of mentions, total count matching the filters)
        """
        limit = max(1, min(limit, MAX_LIST_LIMIT))
        offset = max(0, offset)

        conditions: list[str] = []
        params: list = []
        idx = 1

        if keyword_id:
            conditions.append(f"${idx} = ANY(matched_keywords)")
            params.append(keyword_id)
            idx += 1

        if source:
            conditions.append(f"source = ${idx}")
            params.append(SourceName(source).value)
            idx += 1

        if from_date:
            conditions.append(f"created_at >= ${idx}")
            params.append(from_date)
            idx += 1

        if to_date:
            conditions.append(f"created_at <= ${idx}")
            params.append(to_date)
            idx += 1

        where_clause = " WHERE " + " AND ".join(conditions) if conditions else ""

        total = await self._db.fetchval(
            f"SELECT COUNT(*) FROM mentions{where_clause}", *params
        )

        sql = f"""
            SELECT * FROM mentions{where_clause}
            ORDER BY created_at DESC
            LIMIT ${idx} OFFSET ${idx + 1}
        """
        rows = await self._db.fetch(sql, *params, limit, offset)

        return [_record_to_mention(r) for r in rows], total or 0
