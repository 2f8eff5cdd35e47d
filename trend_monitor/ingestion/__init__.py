"""Feed ingestion: fetch, parse, checkpoint and publish ingestion events."""

from trend_monitor.ingestion.checkpoint import CheckpointService
from trend_monitor.ingestion.feed_client import FeedClient, FeedFetchError
from trend_monitor.ingestion.feed_parser import FeedParseError, FeedParser
from trend_monitor.ingestion.html import html_to_text
from trend_monitor.ingestion.processor import FeedProcessor, ProcessResult
from trend_monitor.ingestion.queue import IngestionQueue, QueuedEvent
from trend_monitor.ingestion.schemas import (
    Checkpoint,
    FeedItem,
    FeedPost,
    IngestionEvent,
)
from trend_monitor.ingestion.service import (
    FeedResult,
    IngestionService,
    parse_published_at,
)

__all__ = [
    "Checkpoint",
    "CheckpointService",
    "FeedClient",
    "FeedFetchError",
    "FeedItem",
    "FeedParseError",
    "FeedParser",
    "FeedPost",
    "FeedProcessor",
    "FeedResult",
    "IngestionEvent",
    "IngestionQueue",
    "IngestionService",
    "ProcessResult",
    "QueuedEvent",
    "html_to_text",
    "parse_published_at",
]
