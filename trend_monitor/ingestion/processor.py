"""
Feed processor - runs incremental ingestion across configured sources.

Sources are processed one at a time. A failing source is recorded in its
health fields and never stops the run.
"""

import time
from dataclasses import dataclass, field

import structlog

from trend_monitor.ingestion.checkpoint import CheckpointService
from trend_monitor.ingestion.feed_client import FeedClient
from trend_monitor.ingestion.schemas import IngestionEvent
from trend_monitor.ingestion.service import IngestionService
from trend_monitor.observability.metrics import get_metrics
from trend_monitor.sources.repository import SourceConfigRepository

logger = structlog.get_logger(__name__)


@dataclass
class ProcessResult:
    """Per-source outcome of a processing run."""

    source_id: str
    source_name: str
    events_count: int = 0
    checkpoint: str | None = None
    error: str | None = None
    events: list[IngestionEvent] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Summary without the events themselves."""
        return {
            "source_id": self.source_id,
            "source_name": self.source_name,
            "events_count": self.events_count,
            "checkpoint": self.checkpoint,
            "error": self.error,
        }


class FeedProcessor:
    """
    Runs IngestionService.process_feed for enabled sources and tracks
    their fetch health.

    Usage:
        processor = FeedProcessor(repo, client, checkpoints)
        events, results = await processor.process_all_sources()
    """

    def __init__(
        self,
        repository: SourceConfigRepository,
        client: FeedClient,
        checkpoint_service: CheckpointService,
        ingestion_service: IngestionService | None = None,
    ):
        self._repo = repository
        self._client = client
        self._checkpoints = checkpoint_service
        self._ingestion = ingestion_service or IngestionService()
        self._metrics = get_metrics()

    async def process_all_sources(
        self,
    ) -> tuple[list[IngestionEvent], list[ProcessResult]]:
        """Process every enabled feed source sequentially."""
        sources = await self._repo.list_enabled()
        if not sources:
            logger.info("No enabled sources to process")
            return [], []

        events: list[IngestionEvent] = []
        results: list[ProcessResult] = []

        for source in sources:
            result = await self.process_source(source.id)
            results.append(result)
            events.extend(result.events)

        failed = sum(1 for r in results if not r.ok)
        logger.info(
            "Processed sources",
            sources=len(results),
            failed=failed,
            events=len(events),
        )
        return events, results

    async def process_source(self, source_id: str) -> ProcessResult:
        """
        Process one source by id.

        Errors are captured in the result and the source's health fields,
        never raised.
        """
        source = await self._repo.get_by_id(source_id)

        if source is None:
            return ProcessResult(
                source_id=source_id,
                source_name="Unknown",
                error="Source not found",
            )

        if not source.enabled:
            return ProcessResult(
                source_id=source_id,
                source_name=source.name,
                error="Source is disabled",
            )

        start = time.perf_counter()
        try:
            feed_result = await self._ingestion.process_feed(
                source.id,
                source.url,
                self._client,
                self._checkpoints,
                source.config.custom_user_agent,
            )
        except Exception as e:
            error_message = str(e) or type(e).__name__
            self._metrics.record_feed_fetch("error", time.perf_counter() - start)

            updated = await self._repo.record_failure(source.id, error_message)
            if updated is not None and not updated.enabled:
                self._metrics.sources_disabled.inc()

            logger.warning(
                "Source fetch failed",
                source_id=source.id,
                source_name=source.name,
                error=error_message,
                consecutive_failures=updated.consecutive_failures if updated else None,
            )
            return ProcessResult(
                source_id=source.id,
                source_name=source.name,
                error=error_message,
            )

        self._metrics.record_feed_fetch("success", time.perf_counter() - start)
        await self._repo.record_success(source.id)

        checkpoint = feed_result.new_checkpoint
        return ProcessResult(
            source_id=source.id,
            source_name=source.name,
            events_count=len(feed_result.events),
            checkpoint=checkpoint.last_published_at if checkpoint else None,
            events=feed_result.events,
        )
