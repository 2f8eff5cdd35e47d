"""Tests for the feed HTTP client."""

import httpx
import pytest
import respx

from trend_monitor.ingestion.feed_client import FeedClient, FeedFetchError
from trend_monitor.ingestion.feed_parser import FeedParseError

FEED_URL = "https://blog.example.com/feed.xml"


class TestFetchFeed:
    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_plain_text_posts(self, rss_feed):
        respx.get(FEED_URL).mock(return_value=httpx.Response(200, content=rss_feed))
        client = FeedClient(default_user_agent="TestBot/1.0")

        posts = await client.fetch_feed(FEED_URL)

        assert len(posts) == 2
        assert posts[0].title == "Running D1 at scale"
        assert posts[0].content == "I love D1\n\nReally."
        assert posts[0].url == "https://blog.example.com/posts/d1-at-scale"
        assert posts[0].published_at == "Wed, 21 Jan 2026 10:00:00 GMT"

    @pytest.mark.asyncio
    @respx.mock
    async def test_default_user_agent(self, rss_feed):
        route = respx.get(FEED_URL).mock(
            return_value=httpx.Response(200, content=rss_feed)
        )
        client = FeedClient(default_user_agent="TestBot/1.0")

        await client.fetch_feed(FEED_URL)

        assert route.calls.last.request.headers["User-Agent"] == "TestBot/1.0"

    @pytest.mark.asyncio
    @respx.mock
    async def test_custom_user_agent_overrides_default(self, rss_feed):
        route = respx.get(FEED_URL).mock(
            return_value=httpx.Response(200, content=rss_feed)
        )
        client = FeedClient(default_user_agent="TestBot/1.0")

        await client.fetch_feed(FEED_URL, user_agent="CustomAgent/2.0")

        assert route.calls.last.request.headers["User-Agent"] == "CustomAgent/2.0"

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_success_status_raises(self):
        respx.get(FEED_URL).mock(return_value=httpx.Response(404))
        client = FeedClient(default_user_agent="TestBot/1.0")

        with pytest.raises(FeedFetchError) as exc_info:
            await client.fetch_feed(FEED_URL)

        assert str(exc_info.value) == f"Failed to fetch feed from {FEED_URL}: 404 Not Found"

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_body_raises_parse_error(self):
        respx.get(FEED_URL).mock(
            return_value=httpx.Response(200, content=b'{"definitely": "not a feed"')
        )
        client = FeedClient(default_user_agent="TestBot/1.0")

        with pytest.raises(FeedParseError):
            await client.fetch_feed(FEED_URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_propagates(self):
        respx.get(FEED_URL).mock(side_effect=httpx.ConnectError("connection refused"))
        client = FeedClient(default_user_agent="TestBot/1.0")

        with pytest.raises(httpx.ConnectError):
            await client.fetch_feed(FEED_URL)
