"""Tests for the Redis-backed active keyword cache."""

import json
from unittest.mock import AsyncMock

import pytest

from trend_monitor.matching.cache import CACHE_KEY, KeywordCache


@pytest.fixture
def store(cloudflare_keyword, react_keyword) -> AsyncMock:
    repo = AsyncMock()
    repo.find_active = AsyncMock(return_value=[cloudflare_keyword, react_keyword])
    return repo


class TestGetActiveKeywords:
    @pytest.mark.asyncio
    async def test_miss_loads_from_store_and_sets_ttl(self, mock_redis, store):
        cache = KeywordCache(mock_redis, store, ttl_seconds=120)

        keywords = await cache.get_active_keywords()

        assert [k.id for k in keywords] == ["kw_cloudflare_d1", "kw_react"]
        store.find_active.assert_awaited_once()
        mock_redis.set.assert_awaited_once()
        key, payload = mock_redis.set.call_args[0]
        assert key == CACHE_KEY
        assert mock_redis.set.call_args[1]["ex"] == 120
        assert json.loads(payload)[0]["name"] == "Cloudflare D1"

    @pytest.mark.asyncio
    async def test_hit_skips_store(self, mock_redis, store, cloudflare_keyword):
        mock_redis.get.return_value = json.dumps([cloudflare_keyword.to_dict()])
        cache = KeywordCache(mock_redis, store)

        keywords = await cache.get_active_keywords()

        assert len(keywords) == 1
        assert keywords[0].name == "Cloudflare D1"
        assert keywords[0].aliases == ["D1"]
        store.find_active.assert_not_called()
        mock_redis.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_active_set_is_cached(self, mock_redis):
        store = AsyncMock()
        store.find_active = AsyncMock(return_value=[])
        cache = KeywordCache(mock_redis, store)

        assert await cache.get_active_keywords() == []
        assert mock_redis.set.call_args[0][1] == "[]"


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_deletes_cache_key(self, mock_redis, store):
        cache = KeywordCache(mock_redis, store)

        await cache.invalidate()

        mock_redis.delete.assert_awaited_once_with(CACHE_KEY)
