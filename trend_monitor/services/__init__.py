"""Long-running workers: feed ingestion and keyword matching."""

from trend_monitor.services.ingestion_service import (
    FeedIngestionWorker,
    IngestionRunResult,
    publish_events,
)
from trend_monitor.services.matcher_service import MatcherWorker

__all__ = [
    "FeedIngestionWorker",
    "IngestionRunResult",
    "MatcherWorker",
    "publish_events",
]
