"""Shared fixtures for sources tests."""

from datetime import datetime, timezone

import pytest


@pytest.fixture
def source_row() -> dict:
    """A dict mimicking an asyncpg Record for a source_configs row."""
    return {
        "id": "src-1",
        "type": "feed",
        "config": {
            "url": "https://blog.example.com/feed.xml",
            "name": "Example Blog",
            "customUserAgent": "ExampleBot/1.0",
        },
        "enabled": True,
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "last_fetch_at": None,
        "last_success_at": None,
        "last_error_at": None,
        "last_error_message": None,
        "consecutive_failures": 0,
        "deleted_at": None,
    }
