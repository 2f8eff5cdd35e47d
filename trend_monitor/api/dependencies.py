"""
Dependency injection for FastAPI endpoints.

Connections are created on first use and shared for the lifetime of the
process; cleanup_dependencies() releases them on shutdown.
"""

import redis.asyncio as redis

from trend_monitor.config.settings import get_settings
from trend_monitor.ingestion.checkpoint import CheckpointService
from trend_monitor.ingestion.feed_client import FeedClient
from trend_monitor.ingestion.processor import FeedProcessor
from trend_monitor.ingestion.queue import IngestionQueue
from trend_monitor.keywords.repository import KeywordsRepository
from trend_monitor.matching.cache import KeywordCache
from trend_monitor.mentions.repository import MentionsRepository
from trend_monitor.sources.repository import SourceConfigRepository
from trend_monitor.sources.validator import FeedValidator
from trend_monitor.storage.database import Database
from trend_monitor.trends.repository import TrendsRepository
from trend_monitor.trends.service import TrendsService

_redis_client: redis.Redis | None = None
_database: Database | None = None
_ingestion_queue: IngestionQueue | None = None


async def get_redis_client() -> redis.Redis:
    """Shared Redis client (checkpoints, keyword cache)."""
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        _redis_client = redis.from_url(
            str(settings.redis_url),
            encoding="utf-8",
            decode_responses=True,
        )

    return _redis_client


async def get_database() -> Database:
    """Shared database connection pool."""
    global _database

    if _database is None:
        # Only a connected pool is cached; a failed connect is retried next request
        db = Database()
        await db.connect()
        _database = db

    return _database


async def get_keywords_repository() -> KeywordsRepository:
    return KeywordsRepository(await get_database())


async def get_mentions_repository() -> MentionsRepository:
    return MentionsRepository(await get_database())


async def get_sources_repository() -> SourceConfigRepository:
    settings = get_settings()
    return SourceConfigRepository(
        await get_database(),
        max_consecutive_failures=settings.max_consecutive_failures,
    )


async def get_keyword_cache() -> KeywordCache:
    settings = get_settings()
    return KeywordCache(
        await get_redis_client(),
        await get_keywords_repository(),
        ttl_seconds=settings.keyword_cache_ttl_seconds,
    )


async def get_trends_service() -> TrendsService:
    return TrendsService(TrendsRepository(await get_database()))


async def get_feed_validator() -> FeedValidator:
    return FeedValidator(default_user_agent=get_settings().feed_user_agent)


async def get_feed_processor() -> FeedProcessor:
    settings = get_settings()
    return FeedProcessor(
        repository=await get_sources_repository(),
        client=FeedClient(
            default_user_agent=settings.feed_user_agent,
            timeout=settings.feed_fetch_timeout_seconds,
        ),
        checkpoint_service=CheckpointService(await get_redis_client()),
    )


async def get_ingestion_queue() -> IngestionQueue:
    global _ingestion_queue

    if _ingestion_queue is None:
        queue = IngestionQueue()
        try:
            await queue.connect()
        except Exception:
            await queue.close()
            raise
        _ingestion_queue = queue

    return _ingestion_queue


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _redis_client, _database, _ingestion_queue

    if _ingestion_queue is not None:
        await _ingestion_queue.close()
        _ingestion_queue = None

    if _database is not None:
        await _database.close()
        _database = None

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
