"""Data models for the sources module."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

# Consecutive-failure bands for the derived health status
WARNING_FAILURE_LIMIT = 5


class SourceType(str, Enum):
    FEED = "feed"
    X = "x"


@dataclass
class FeedSourceConfig:
    """Type-specific configuration of a feed source (stored as JSONB)."""

    url: str
    name: str
    custom_user_agent: str | None = None
    feed_title: str | None = None
    feed_description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url, "name": self.name}
        if self.custom_user_agent:
            data["customUserAgent"] = self.custom_user_agent
        if self.feed_title:
            data["feedTitle"] = self.feed_title
        if self.feed_description:
            data["feedDescription"] = self.feed_description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeedSourceConfig":
        return cls(
            url=data.get("url", ""),
            name=data.get("name", ""),
            custom_user_agent=data.get("customUserAgent"),
            feed_title=data.get("feedTitle"),
            feed_description=data.get("feedDescription"),
        )


@dataclass
class SourceConfig:
    """
    A configured ingestion source with its fetch health.

    Soft-deleted sources keep their row with deleted_at set. A source is
    disabled automatically once consecutive_failures reaches the
    configured threshold.
    """

    id: str
    type: SourceType
    config: FeedSourceConfig
    enabled: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_fetch_at: datetime | None = None
    last_success_at: datetime | None = None
    last_error_at: datetime | None = None
    last_error_message: str | None = None
    consecutive_failures: int = 0
    deleted_at: datetime | None = None

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def url(self) -> str:
        return self.config.url


def health_status(source: SourceConfig) -> str:
    """Derive the dashboard health badge: success, warning or error."""
    if source.last_fetch_at is None:
        return "warning"
    if source.consecutive_failures == 0:
        return "success"
    if source.consecutive_failures <= WARNING_FAILURE_LIMIT:
        return "warning"
    return "error"
