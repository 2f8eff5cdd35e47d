"""Tests for the keyword matcher consumer."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from trend_monitor.matching.consumer import KeywordMatcherConsumer, event_text


@pytest.fixture
def cache(cloudflare_keyword, react_keyword) -> AsyncMock:
    cache = AsyncMock()
    cache.get_active_keywords = AsyncMock(
        return_value=[cloudflare_keyword, react_keyword]
    )
    return cache


@pytest.fixture
def mentions() -> AsyncMock:
    repo = AsyncMock()
    repo.create_or_ignore = AsyncMock(return_value=MagicMock(id="mention-1"))
    return repo


class TestEventText:
    def test_title_and_content(self, sample_event):
        assert event_text(sample_event) == (
            "Running D1 at scale\nI love D1 for small side projects."
        )

    def test_content_only(self, sample_event):
        event = sample_event.model_copy(update={"title": None})
        assert event_text(event) == "I love D1 for small side projects."


class TestHandleBatch:
    @pytest.mark.asyncio
    async def test_matched_event_creates_mention(self, cache, mentions, sample_event):
        consumer = KeywordMatcherConsumer(cache, mentions)

        result = await consumer.handle_batch([sample_event])

        assert result.processed == 1
        assert result.created == 1
        assert result.duplicates == 0
        kwargs = mentions.create_or_ignore.call_args.kwargs
        assert kwargs["source"] == "feed"
        assert kwargs["source_id"] == sample_event.source_id
        assert kwargs["matched_keywords"] == ["kw_cloudflare_d1"]
        assert kwargs["created_at"] == sample_event.created_at

    @pytest.mark.asyncio
    async def test_unmatched_event_is_not_stored(self, cache, mentions, sample_event):
        event = sample_event.model_copy(
            update={"title": "Weekly notes", "content": "Nothing relevant here."}
        )
        consumer = KeywordMatcherConsumer(cache, mentions)

        result = await consumer.handle_batch([event])

        assert result.unmatched == 1
        assert result.created == 0
        mentions.create_or_ignore.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_is_counted_not_raised(self, cache, mentions, sample_event):
        mentions.create_or_ignore.side_effect = [MagicMock(id="m1"), None]
        consumer = KeywordMatcherConsumer(cache, mentions)

        result = await consumer.handle_batch([sample_event, sample_event])

        assert result.processed == 2
        assert result.created == 1
        assert result.duplicates == 1

    @pytest.mark.asyncio
    async def test_no_active_keywords_skips_batch(self, mentions, sample_event):
        cache = AsyncMock()
        cache.get_active_keywords = AsyncMock(return_value=[])
        consumer = KeywordMatcherConsumer(cache, mentions)

        result = await consumer.handle_batch([sample_event])

        assert result.processed == 0
        mentions.create_or_ignore.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_batch(self, cache, mentions):
        consumer = KeywordMatcherConsumer(cache, mentions)

        result = await consumer.handle_batch([])

        assert result.processed == 0
        cache.get_active_keywords.assert_not_called()

    @pytest.mark.asyncio
    async def test_persistence_error_propagates(self, cache, mentions, sample_event):
        mentions.create_or_ignore.side_effect = RuntimeError("connection reset")
        consumer = KeywordMatcherConsumer(cache, mentions)

        with pytest.raises(RuntimeError, match="connection reset"):
            await consumer.handle_batch([sample_event])
