"""
asyncpg pool shared by the keyword, mention, source, aggregation and
trends repositories.

Repositories only need the four query helpers below; every statement runs
on a connection borrowed from the pool for the duration of that call.
"""

import json
import logging
from types import TracebackType
from typing import Any

import asyncpg

from trend_monitor.config.settings import get_settings

logger = logging.getLogger(__name__)

# Long aggregation scans run well under this
_COMMAND_TIMEOUT_SECONDS = 60


async def _register_jsonb(conn: asyncpg.Connection) -> None:
    # source_configs.config is stored as JSONB and read back as a dict
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


class Database:
    """
    Connection pool for the trend-monitor PostgreSQL database.

    Usable as an async context manager by the CLI commands:

        async with Database() as db:
            rows = await db.fetch("SELECT * FROM keywords")

    The API keeps one long-lived instance and calls connect()/close()
    from its dependency layer.
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
    ):
        settings = get_settings()
        self._dsn = database_url or str(settings.database_url)
        self._pool_bounds = (
            min_size or settings.db_pool_min_size,
            max_size or settings.db_pool_max_size,
        )
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Open the pool. Connection errors are logged and re-raised."""
        if self._pool is not None:
            return
        low, high = self._pool_bounds
        try:
            self._pool = await asyncpg.create_pool(
                self._dsn,
                min_size=low,
                max_size=high,
                command_timeout=_COMMAND_TIMEOUT_SECONDS,
                init=_register_jsonb,
            )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("Could not open PostgreSQL pool: %s", e)
            raise
        logger.info("PostgreSQL pool ready (%d-%d connections)", low, high)

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("PostgreSQL pool closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._pool

    async def execute(self, query: str, *args: Any) -> str:
        """Run a statement and return its status tag, e.g. ``"UPDATE 1"``."""
        return await self._require_pool().execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        return await self._require_pool().fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        return await self._require_pool().fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        return await self._require_pool().fetchval(query, *args)

    async def health_check(self) -> bool:
        """True when ``SELECT 1`` round-trips; never raises."""
        try:
            return await self.fetchval("SELECT 1") == 1
        except (RuntimeError, OSError, asyncpg.PostgresError) as e:
            logger.warning("PostgreSQL health check failed: %s", e)
            return False
