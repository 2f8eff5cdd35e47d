"""Tests for source config models and derived health."""

from datetime import datetime, timezone

import pytest

from trend_monitor.sources.schemas import (
    FeedSourceConfig,
    SourceConfig,
    SourceType,
    health_status,
)


def _source(last_fetch_at=None, failures=0) -> SourceConfig:
    return SourceConfig(
        id="src-1",
        type=SourceType.FEED,
        config=FeedSourceConfig(url="https://example.com/feed", name="Example"),
        last_fetch_at=last_fetch_at,
        consecutive_failures=failures,
    )


FETCHED = datetime(2026, 1, 21, tzinfo=timezone.utc)


class TestHealthStatus:
    def test_never_fetched_is_warning(self):
        assert health_status(_source()) == "warning"

    def test_no_failures_is_success(self):
        assert health_status(_source(FETCHED, 0)) == "success"

    @pytest.mark.parametrize("failures", [1, 5])
    def test_few_failures_is_warning(self, failures):
        assert health_status(_source(FETCHED, failures)) == "warning"

    @pytest.mark.parametrize("failures", [6, 10])
    def test_many_failures_is_error(self, failures):
        assert health_status(_source(FETCHED, failures)) == "error"


class TestFeedSourceConfig:
    def test_to_dict_omits_empty_optionals(self):
        config = FeedSourceConfig(url="https://example.com/feed", name="Example")
        assert config.to_dict() == {"url": "https://example.com/feed", "name": "Example"}

    def test_from_dict_reads_camel_case(self):
        config = FeedSourceConfig.from_dict(
            {
                "url": "https://example.com/feed",
                "name": "Example",
                "customUserAgent": "Bot/1",
                "feedTitle": "Example Feed",
                "feedDescription": "All the posts",
            }
        )
        assert config.custom_user_agent == "Bot/1"
        assert config.feed_title == "Example Feed"
        assert config.feed_description == "All the posts"

    def test_source_exposes_name_and_url(self):
        source = _source()
        assert source.name == "Example"
        assert source.url == "https://example.com/feed"
