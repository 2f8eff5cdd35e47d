"""
Data shapes flowing through feed ingestion.

IngestionEvent is the queue payload consumed by the keyword matcher. Its
JSON form uses camelCase keys (sourceId, createdAt, fetchedAt); keep the
aliases in sync with any other producer writing to the stream.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from trend_monitor.mentions.schemas import SourceName


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass
class FeedItem:
    """One entry as produced by the feed parser. published_at is the raw string."""

    id: str = ""
    title: str = ""
    link: str = ""
    content: str = ""
    author: str | None = None
    published_at: str = ""


@dataclass
class FeedPost:
    """A feed item with its content converted to plain text."""

    id: str
    title: str
    content: str
    url: str
    author: str | None
    published_at: str


@dataclass
class Checkpoint:
    """Per-feed progress marker stored in Redis."""

    last_published_at: str
    last_fetched_at: str

    def to_dict(self) -> dict[str, str]:
        return {
            "lastPublishedAt": self.last_published_at,
            "lastFetchedAt": self.last_fetched_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Checkpoint":
        return cls(
            last_published_at=data["lastPublishedAt"],
            last_fetched_at=data["lastFetchedAt"],
        )


class IngestionEvent(BaseModel):
    """A post ready for keyword matching."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    source: SourceName
    source_id: str = Field(alias="sourceId")
    title: str | None = None
    content: str
    url: str
    author: str | None = None
    created_at: datetime = Field(alias="createdAt")
    fetched_at: datetime = Field(default_factory=_utc_now, alias="fetchedAt")
    metadata: dict[str, Any] | None = None

    def to_json(self) -> str:
        """Serialize with camelCase keys, omitting unset optionals."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> "IngestionEvent":
        return cls.model_validate_json(data)
