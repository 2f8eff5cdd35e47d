"""Database repository for the keywords table."""

import logging
import uuid

import asyncpg

from trend_monitor.keywords.schemas import Keyword, KeywordStatus
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS keywords (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL UNIQUE,
    aliases     TEXT[] NOT NULL DEFAULT '{}',
    tags        TEXT[] NOT NULL DEFAULT '{}',
    status      TEXT NOT NULL DEFAULT 'active'
                CHECK (status IN ('active', 'archived')),
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_keywords_status ON keywords(status);
CREATE INDEX IF NOT EXISTS idx_keywords_created_at ON keywords(created_at DESC);
"""

_INSERT_SQL = """
INSERT INTO keywords (id, name, aliases, tags, status)
VALUES ($1, $2, $3, $4, $5)
RETURNING *
"""

MAX_LIST_LIMIT = 1000


class KeywordValidationError(ValueError):
    """Raised when keyword input fails validation (e.g. empty name)."""


class KeywordConflictError(Exception):
    """Raised when a keyword name is already taken."""


def _clean_terms(values: list[str] | None) -> list[str]:
    """Trim entries and drop blanks."""
    return [v.strip() for v in values or [] if v and v.strip()]


def _validate_name(name: str | None) -> str:
    trimmed = (name or "").strip()
    if not trimmed:
        raise KeywordValidationError("Keyword name cannot be empty")
    return trimmed


def _record_to_keyword(record) -> Keyword:
    """Convert an asyncpg Record to a Keyword dataclass."""
    return Keyword(
        id=record["id"],
        name=record["name"],
        aliases=list(record["aliases"] or []),
        tags=list(record["tags"] or []),
        status=KeywordStatus(record["status"]),
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


class KeywordsRepository:
    """CRUD operations for the keywords table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the keywords table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Keywords table ensured")

    async def create(
        self,
        name: str,
        aliases: list[str] | None = None,
        tags: list[str] | None = None,
    ) -> Keyword:
        """
        Insert a new active keyword.

        Raises:
            KeywordValidationError: If the trimmed name is empty
            KeywordConflictError: If the name already exists
        """
        clean_name = _validate_name(name)

        try:
            row = await self._db.fetchrow(
                _INSERT_SQL,
                str(uuid.uuid4()),
                clean_name,
                _clean_terms(aliases),
                _clean_terms(tags),
                KeywordStatus.ACTIVE.value,
            )
        except asyncpg.UniqueViolationError as e:
            raise KeywordConflictError(f"Keyword '{clean_name}' already exists") from e

        logger.info("Created keyword %s (%s)", row["id"], clean_name)
        return _record_to_keyword(row)

    async def get_by_id(self, keyword_id: str) -> Keyword | None:
        """Fetch a single keyword by id."""
        row = await self._db.fetchrow(
            "SELECT * FROM keywords WHERE id = $1", keyword_id
        )
        return _record_to_keyword(row) if row else None

    async def list_keywords(
        self,
        status: KeywordStatus | str | None = None,
        tag: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Keyword]:
        """List keywords newest first, optionally filtered by status and tag."""
        if limit < 1 or limit > MAX_LIST_LIMIT:
            raise KeywordValidationError(
                f"Limit must be between 1 and {MAX_LIST_LIMIT}"
            )
        if offset < 0:
            raise KeywordValidationError("Offset must be non-negative")

        conditions: list[str] = []
        params: list = []
        idx = 1

        if status:
            conditions.append(f"status = ${idx}")
            params.append(KeywordStatus(status).value)
            idx += 1

        if tag:
            conditions.append(f"${idx} = ANY(tags)")
            params.append(tag)
            idx += 1

        where_clause = " WHERE " + " AND ".join(conditions) if conditions else ""
        sql = f"""
            SELECT * FROM keywords{where_clause}
            ORDER BY created_at DESC
            LIMIT ${idx} OFFSET ${idx + 1}
        """
        params.extend([limit, offset])
        rows = await self._db.fetch(sql, *params)
        return [_record_to_keyword(r) for r in rows]

    async def find_active(self) -> list[Keyword]:
        """Fetch every active keyword (the matcher's working set)."""
        rows = await self._db.fetch(
            "SELECT * FROM keywords WHERE status = $1 ORDER BY name",
            KeywordStatus.ACTIVE.value,
        )
        return [_record_to_keyword(r) for r in rows]

    async def update(
        self,
        keyword_id: str,
        name: str | None = None,
        aliases: list[str] | None = None,
        tags: list[str] | None = None,
        status: KeywordStatus | str | None = None,
    ) -> Keyword | None:
        """
        Partially update a keyword. Fields left as None are unchanged.

        Returns:
            The updated keyword, or None if it does not exist
        """
        existing = await self.get_by_id(keyword_id)
        if existing is None:
            return None

        sets: list[str] = []
        params: list = []

        if name is not None:
            sets.append(f"name = ${len(params) + 1}")
            params.append(_validate_name(name))
        if aliases is not None:
            sets.append(f"aliases = ${len(params) + 1}")
            params.append(_clean_terms(aliases))
        if tags is not None:
            sets.append(f"tags = ${len(params) + 1}")
            params.append(_clean_terms(tags))
        if status is not None:
            sets.append(f"status = ${len(params) + 1}")
            params.append(KeywordStatus(status).value)

        if not sets:
            return existing

        sql = f"""
            UPDATE keywords SET {", ".join(sets)}, updated_at = NOW()
            WHERE id = ${len(params) + 1}
            RETURNING *
        """
        params.append(keyword_id)

        try:
            row = await self._db.fetchrow(sql, *params)
        except asyncpg.UniqueViolationError as e:
            raise KeywordConflictError(f"Keyword '{name}' already exists") from e

        return _record_to_keyword(row) if row else None

    async def archive(self, keyword_id: str) -> bool:
        """Soft-delete a keyword. Returns True if a row was updated."""
        result = await self._db.execute(
            """
            UPDATE keywords SET status = 'archived', updated_at = NOW()
            WHERE id = $1
            """,
            keyword_id,
        )
        return result.endswith("1")
