"""Shared fixtures for API tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from trend_monitor.api.app import create_app
from trend_monitor.api.auth import verify_api_key
from trend_monitor.api.dependencies import (
    get_database,
    get_feed_processor,
    get_feed_validator,
    get_ingestion_queue,
    get_keyword_cache,
    get_keywords_repository,
    get_mentions_repository,
    get_redis_client,
    get_sources_repository,
    get_trends_service,
)
from trend_monitor.keywords.schemas import Keyword, KeywordStatus
from trend_monitor.mentions.schemas import Mention, SourceName
from trend_monitor.sources.schemas import FeedSourceConfig, SourceConfig, SourceType

CREATED_AT = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_keyword(keyword_id: str = "kw-1", name: str = "Cloudflare D1", **kwargs) -> Keyword:
    """Helper to create a Keyword with sensible defaults."""
    return Keyword(
        id=keyword_id,
        name=name,
        aliases=kwargs.pop("aliases", ["D1"]),
        tags=kwargs.pop("tags", ["database"]),
        status=kwargs.pop("status", KeywordStatus.ACTIVE),
        created_at=kwargs.pop("created_at", CREATED_AT),
        updated_at=kwargs.pop("updated_at", CREATED_AT),
    )


def make_mention(mention_id: str = "m-1") -> Mention:
    return Mention(
        id=mention_id,
        source=SourceName.FEED,
        source_id="https://blog.example.com/posts/d1",
        title="Running D1 at scale",
        content="I love D1",
        url="https://blog.example.com/posts/d1",
        created_at=datetime(2026, 1, 20, 9, 30, tzinfo=timezone.utc),
        fetched_at=datetime(2026, 1, 20, 10, 0, tzinfo=timezone.utc),
        matched_keywords=["kw-1"],
    )


def make_source(source_id: str = "src-1", **kwargs) -> SourceConfig:
    return SourceConfig(
        id=source_id,
        type=SourceType.FEED,
        config=FeedSourceConfig(
            url="https://blog.example.com/feed.xml",
            name="Example Blog",
            custom_user_agent=kwargs.pop("custom_user_agent", None),
        ),
        enabled=kwargs.pop("enabled", True),
        created_at=CREATED_AT,
        updated_at=CREATED_AT,
        last_fetch_at=kwargs.pop("last_fetch_at", None),
        consecutive_failures=kwargs.pop("consecutive_failures", 0),
    )


@pytest.fixture
def sample_keyword() -> Keyword:
    return make_keyword()


@pytest.fixture
def sample_mention() -> Mention:
    return make_mention()


@pytest.fixture
def sample_source() -> SourceConfig:
    return make_source()


@pytest.fixture
def mock_keywords_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_keywords = AsyncMock(return_value=[])
    repo.get_by_id = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_keyword_cache() -> AsyncMock:
    cache = AsyncMock()
    cache.invalidate = AsyncMock()
    return cache


@pytest.fixture
def mock_mentions_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_mentions = AsyncMock(return_value=([], 0))
    repo.get_by_id = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_sources_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_sources = AsyncMock(return_value=[])
    repo.get_by_id = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_validator() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_trends_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_processor() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_queue() -> AsyncMock:
    queue = AsyncMock()
    queue.publish_batch = AsyncMock(return_value=[])
    return queue


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.health_check = AsyncMock(return_value=True)
    return db


@pytest.fixture
def mock_redis_client() -> AsyncMock:
    client = AsyncMock()
    client.ping = AsyncMock(return_value=True)
    return client


@pytest.fixture
def client(
    mock_keywords_repo,
    mock_keyword_cache,
    mock_mentions_repo,
    mock_sources_repo,
    mock_validator,
    mock_trends_service,
    mock_processor,
    mock_queue,
    mock_db,
    mock_redis_client,
):
    """TestClient with every dependency replaced by a mock."""
    app = create_app()
    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_keywords_repository] = lambda: mock_keywords_repo
    app.dependency_overrides[get_keyword_cache] = lambda: mock_keyword_cache
    app.dependency_overrides[get_mentions_repository] = lambda: mock_mentions_repo
    app.dependency_overrides[get_sources_repository] = lambda: mock_sources_repo
    app.dependency_overrides[get_feed_validator] = lambda: mock_validator
    app.dependency_overrides[get_trends_service] = lambda: mock_trends_service
    app.dependency_overrides[get_feed_processor] = lambda: mock_processor
    app.dependency_overrides[get_ingestion_queue] = lambda: mock_queue
    app.dependency_overrides[get_database] = lambda: mock_db
    app.dependency_overrides[get_redis_client] = lambda: mock_redis_client

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
