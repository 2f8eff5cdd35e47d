"""Data models for the mentions module."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SourceName(str, Enum):
    """Origin platform of a mention. Only feeds are ingested today."""

    REDDIT = "reddit"
    X = "x"
    FEED = "feed"


@dataclass
class Mention:
    """
    One ingested post matched against at least one keyword.

    (source, source_id) identifies the origin post; re-ingesting it is a
    no-op. created_at is the origin timestamp, fetched_at the ingestion
    timestamp.
    """

    id: str
    source: SourceName
    source_id: str
    content: str
    url: str
    created_at: datetime
    fetched_at: datetime
    matched_keywords: list[str] = field(default_factory=list)
    title: str | None = None
    author: str | None = None
