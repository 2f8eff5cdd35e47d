"""
Request and response models for the trend-monitor API.
"""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field

from trend_monitor.keywords.schemas import KeywordStatus
from trend_monitor.mentions.schemas import SourceName
from trend_monitor.sources.schemas import SourceType


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(..., description="Error message")
    error_type: str = Field(default="error", description="Error category")


class ComponentHealth(BaseModel):
    status: Literal["healthy", "unhealthy"]
    latency_ms: float | None = None
    details: dict | None = None


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: Literal["healthy", "degraded"]
    version: str
    components: dict[str, ComponentHealth]


# -- Keywords --------------------------------------------------------------


class CreateKeywordRequest(BaseModel):
    name: str = Field(..., description="Keyword name (trimmed, must be non-empty)")
    aliases: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class UpdateKeywordRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = None
    aliases: list[str] | None = None
    tags: list[str] | None = None
    status: KeywordStatus | None = None


class KeywordItem(BaseModel):
    id: str
    name: str
    aliases: list[str]
    tags: list[str]
    status: KeywordStatus
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class KeywordsListResponse(BaseModel):
    keywords: list[KeywordItem]
    total: int


# -- Mentions --------------------------------------------------------------


class MentionItem(BaseModel):
    id: str
    source: SourceName
    source_id: str
    title: str | None = None
    content: str
    url: str
    author: str | None = None
    created_at: dt.datetime
    fetched_at: dt.datetime
    matched_keywords: list[str]


class MentionsListResponse(BaseModel):
    mentions: list[MentionItem]
    total: int
    limit: int
    offset: int


# -- Sources ---------------------------------------------------------------


class CreateSourceRequest(BaseModel):
    url: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: SourceType = SourceType.FEED
    custom_user_agent: str | None = None
    feed_title: str | None = None
    feed_description: str | None = None


class UpdateSourceRequest(BaseModel):
    url: str | None = None
    name: str | None = None
    custom_user_agent: str | None = None
    feed_title: str | None = None
    feed_description: str | None = None
    enabled: bool | None = None


class ValidateFeedRequest(BaseModel):
    url: str = Field(..., min_length=1)
    custom_user_agent: str | None = None


class FeedConfigItem(BaseModel):
    url: str
    name: str
    custom_user_agent: str | None = None
    feed_title: str | None = None
    feed_description: str | None = None


class SourceItem(BaseModel):
    id: str
    type: SourceType
    config: FeedConfigItem
    enabled: bool
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    last_fetch_at: dt.datetime | None = None
    last_success_at: dt.datetime | None = None
    last_error_at: dt.datetime | None = None
    last_error_message: str | None = None
    consecutive_failures: int = 0
    deleted_at: dt.datetime | None = None
    health: Literal["success", "warning", "error"]


class SourcesListResponse(BaseModel):
    sources: list[SourceItem]


class FeedMetadataItem(BaseModel):
    title: str
    description: str
    format: Literal["rss", "atom"]
    last_updated: str | None = None


class FeedPreviewEntry(BaseModel):
    title: str
    link: str
    pub_date: str | None = None
    content: str | None = None


class ValidateFeedResponse(BaseModel):
    valid: bool
    error: str | None = None
    metadata: FeedMetadataItem | None = None
    preview: list[FeedPreviewEntry] = Field(default_factory=list)


# -- Trends ----------------------------------------------------------------


class TrendKeywordItem(BaseModel):
    keyword_id: str
    name: str
    current_period: int
    previous_period: int
    growth_rate: float
    is_emerging: bool


class SourceCountItem(BaseModel):
    source: str
    count: int


class TrendsOverviewResponse(BaseModel):
    top_keywords: list[TrendKeywordItem]
    emerging_keywords: list[TrendKeywordItem]
    total_mentions: int
    source_breakdown: list[SourceCountItem]


class TrendPointItem(BaseModel):
    date: dt.date
    source: str
    count: int


class KeywordTrendResponse(BaseModel):
    keyword_id: str
    name: str
    time_series: list[TrendPointItem]
    total_mentions: int
    average_per_day: float


# -- Trigger ---------------------------------------------------------------


class SourceRunItem(BaseModel):
    source_id: str
    source_name: str
    events_count: int
    checkpoint: str | None = None
    error: str | None = None


class TriggerResponse(BaseModel):
    sources: list[SourceRunItem]
    events_published: int
    sources_failed: int
