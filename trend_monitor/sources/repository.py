"""Database repository for the source_configs table."""

import logging
import uuid
from urllib.parse import urlparse

from trend_monitor.sources.schemas import FeedSourceConfig, SourceConfig, SourceType
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

DEFAULT_MAX_FAILURES = 10

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS source_configs (
    id                    TEXT PRIMARY KEY,
    type                  TEXT NOT NULL CHECK (type IN ('feed', 'x')),
    config                JSONB NOT NULL,
    enabled               BOOLEAN NOT NULL DEFAULT TRUE,
    created_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    last_fetch_at         TIMESTAMPTZ,
    last_success_at       TIMESTAMPTZ,
    last_error_at         TIMESTAMPTZ,
    last_error_message    TEXT,
    consecutive_failures  INTEGER NOT NULL DEFAULT 0,
    deleted_at            TIMESTAMPTZ
);

CREATE INDEX IF NOT EXISTS idx_source_configs_enabled
    ON source_configs(type, enabled) WHERE deleted_at IS NULL;
"""

_INSERT_SQL = """
INSERT INTO source_configs (id, type, config, enabled)
VALUES ($1, $2, $3, TRUE)
RETURNING *
"""

_RECORD_SUCCESS_SQL = """
UPDATE source_configs SET
    last_fetch_at = NOW(),
    last_success_at = NOW(),
    consecutive_failures = 0,
    last_error_at = NULL,
    last_error_message = NULL,
    updated_at = NOW()
WHERE id = $1
RETURNING *
"""

# The increment and the threshold check happen in one statement so that
# concurrent failures cannot lose updates. Right-hand expressions see the
# pre-update row.
_RECORD_FAILURE_SQL = """
UPDATE source_configs SET
    consecutive_failures = consecutive_failures + 1,
    last_fetch_at = NOW(),
    last_error_at = NOW(),
    last_error_message = $2,
    enabled = CASE
        WHEN consecutive_failures + 1 >= $3 THEN FALSE
        ELSE enabled
    END,
    updated_at = NOW()
WHERE id = $1
RETURNING *
"""


class SourceValidationError(ValueError):
    """Raised when source input fails validation (bad URL, empty name)."""


def validate_url(url: str | None) -> str:
    """Require an http(s) URL with a host. Returns the trimmed URL."""
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise SourceValidationError(f"Invalid feed URL: {url!r}")
    return candidate


def validate_name(name: str | None) -> str:
    trimmed = (name or "").strip()
    if not trimmed:
        raise SourceValidationError("Source name cannot be empty")
    return trimmed


def _record_to_source(record) -> SourceConfig:
    """Convert an asyncpg Record to a SourceConfig dataclass."""
    return SourceConfig(
        id=record["id"],
        type=SourceType(record["type"]),
        config=FeedSourceConfig.from_dict(dict(record["config"] or {})),
        enabled=record["enabled"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
        last_fetch_at=record["last_fetch_at"],
        last_success_at=record["last_success_at"],
        last_error_at=record["last_error_at"],
        last_error_message=record["last_error_message"],
        consecutive_failures=record["consecutive_failures"],
        deleted_at=record["deleted_at"],
    )


class SourceConfigRepository:
    """CRUD and fetch-health tracking for the source_configs table."""

    def __init__(
        self,
        database: Database,
        max_consecutive_failures: int = DEFAULT_MAX_FAILURES,
    ) -> None:
        self._db = database
        self._max_failures = max_consecutive_failures

    async def create_table(self) -> None:
        """Create the source_configs table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Source configs table ensured")

    async def create(
        self,
        url: str,
        name: str,
        type: SourceType | str = SourceType.FEED,
        custom_user_agent: str | None = None,
        feed_title: str | None = None,
        feed_description: str | None = None,
    ) -> SourceConfig:
        """
        Insert a new enabled source.

        Raises:
            SourceValidationError: If the URL or name is invalid
        """
        config = FeedSourceConfig(
            url=validate_url(url),
            name=validate_name(name),
            custom_user_agent=custom_user_agent,
            feed_title=feed_title,
            feed_description=feed_description,
        )
        row = await self._db.fetchrow(
            _INSERT_SQL,
            str(uuid.uuid4()),
            SourceType(type).value,
            config.to_dict(),
        )
        logger.info("Created source %s (%s)", row["id"], config.name)
        return _record_to_source(row)

    async def get_by_id(self, source_id: str) -> SourceConfig | None:
        """Fetch a single source by id, including soft-deleted ones."""
        row = await self._db.fetchrow(
            "SELECT * FROM source_configs WHERE id = $1", source_id
        )
        return _record_to_source(row) if row else None

    async def list_sources(self, include_deleted: bool = False) -> list[SourceConfig]:
        """List sources oldest first."""
        where_clause = "" if include_deleted else " WHERE deleted_at IS NULL"
        rows = await self._db.fetch(
            f"SELECT * FROM source_configs{where_clause} ORDER BY created_at"
        )
        return [_record_to_source(r) for r in rows]

    async def list_enabled(self) -> list[SourceConfig]:
        """List enabled, non-deleted feed sources (the ingestion working set)."""
        rows = await self._db.fetch(
            """
            SELECT * FROM source_configs
            WHERE type = $1 AND enabled = TRUE AND deleted_at IS NULL
            ORDER BY created_at
            """,
            SourceType.FEED.value,
        )
        return [_record_to_source(r) for r in rows]

    async def update(
        self,
        source_id: str,
        url: str | None = None,
        name: str | None = None,
        custom_user_agent: str | None = None,
        feed_title: str | None = None,
        feed_description: str | None = None,
        enabled: bool | None = None,
    ) -> SourceConfig | None:
        """
        Partially update a source. Config fields are merged into the
        existing config; fields left as None are unchanged.

        Returns:
            The updated source, or None if it does not exist
        """
        existing = await self.get_by_id(source_id)
        if existing is None:
            return None

        config = existing.config
        if url is not None:
            config.url = validate_url(url)
        if name is not None:
            config.name = validate_name(name)
        if custom_user_agent is not None:
            config.custom_user_agent = custom_user_agent
        if feed_title is not None:
            config.feed_title = feed_title
        if feed_description is not None:
            config.feed_description = feed_description

        row = await self._db.fetchrow(
            """
            UPDATE source_configs SET
                config = $2,
                enabled = $3,
                updated_at = NOW()
            WHERE id = $1
            RETURNING *
            """,
            source_id,
            config.to_dict(),
            existing.enabled if enabled is None else enabled,
        )
        return _record_to_source(row) if row else None

    async def soft_delete(self, source_id: str) -> bool:
        """Mark a source deleted and disable it. Returns True if a row changed."""
        result = await self._db.execute(
            """
            UPDATE source_configs SET
                deleted_at = NOW(),
                enabled = FALSE,
                updated_at = NOW()
            WHERE id = $1 AND deleted_at IS NULL
            """,
            source_id,
        )
        return result.endswith("1")

    async def toggle(self, source_id: str) -> SourceConfig | None:
        """Flip the enabled flag."""
        row = await self._db.fetchrow(
            """
            UPDATE source_configs SET
                enabled = NOT enabled,
                updated_at = NOW()
            WHERE id = $1
            RETURNING *
            """,
            source_id,
        )
        return _record_to_source(row) if row else None

    async def record_success(self, source_id: str) -> SourceConfig | None:
        """Record a successful fetch and reset the failure streak."""
        row = await self._db.fetchrow(_RECORD_SUCCESS_SQL, source_id)
        return _record_to_source(row) if row else None

    async def record_failure(
        self, source_id: str, error_message: str
    ) -> SourceConfig | None:
        """
        Record a failed fetch.

        Increments consecutive_failures and disables the source once the
        count reaches the threshold.

        Returns:
            The updated source, or None if it does not exist
        """
        row = await self._db.fetchrow(
            _RECORD_FAILURE_SQL, source_id, error_message, self._max_failures
        )
        if row is None:
            return None

        source = _record_to_source(row)
        if not source.enabled and source.consecutive_failures == self._max_failures:
            logger.warning(
                "Source %s disabled after %d consecutive failures",
                source_id,
                source.consecutive_failures,
            )
        return source
