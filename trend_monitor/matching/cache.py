"""Redis-backed cache of the active keyword set."""

import json
import logging
from typing import Protocol

import redis.asyncio as redis

from trend_monitor.keywords.schemas import Keyword

logger = logging.getLogger(__name__)

CACHE_KEY = "active_keywords"
DEFAULT_TTL_SECONDS = 300


class KeywordStore(Protocol):
    """Anything that can list the active keywords (KeywordsRepository)."""

    async def find_active(self) -> list[Keyword]: ...


class KeywordCache:
    """
    Read-through cache for active keywords.

    Other processes may see a stale set for up to ttl_seconds after a
    keyword write; invalidate() shortens that window for the next reader.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        store: KeywordStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        self._redis = redis_client
        self._store = store
        self._ttl = ttl_seconds

    async def get_active_keywords(self) -> list[Keyword]:
        cached = await self._redis.get(CACHE_KEY)
        if cached:
            return [Keyword.from_dict(item) for item in json.loads(cached)]

        keywords = await self._store.find_active()
        await self._redis.set(
            CACHE_KEY,
            json.dumps([k.to_dict() for k in keywords]),
            ex=self._ttl,
        )
        logger.debug("Keyword cache refreshed with %d keywords", len(keywords))
        return keywords

    async def invalidate(self) -> None:
        await self._redis.delete(CACHE_KEY)
