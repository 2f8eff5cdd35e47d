"""
Feed ingestion worker.

Runs the feed processor on an interval and publishes the resulting events
to the ingestion stream. The same run_once() backs the `ingest --once`
command and the API trigger endpoints.
"""

import asyncio
from dataclasses import dataclass, field

import structlog

from trend_monitor.config.settings import get_settings
from trend_monitor.ingestion.processor import FeedProcessor, ProcessResult
from trend_monitor.ingestion.queue import IngestionQueue
from trend_monitor.ingestion.schemas import IngestionEvent
from trend_monitor.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


@dataclass
class IngestionRunResult:
    """Outcome of one ingestion run across sources."""

    results: list[ProcessResult] = field(default_factory=list)
    events_published: int = 0

    @property
    def sources_failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    def to_dict(self) -> dict:
        return {
            "sources": [r.to_dict() for r in self.results],
            "events_published": self.events_published,
            "sources_failed": self.sources_failed,
        }


async def publish_events(queue: IngestionQueue, events: list[IngestionEvent]) -> int:
    """Publish events to the ingestion stream. Returns the count."""
    if not events:
        return 0
    await queue.publish_batch(events)
    get_metrics().events_published.inc(len(events))
    return len(events)


class FeedIngestionWorker:
    """
    Periodic feed ingestion.

    Usage:
        worker = FeedIngestionWorker(processor, queue)
        await worker.start()  # Runs until stopped
    """

    def __init__(
        self,
        processor: FeedProcessor,
        queue: IngestionQueue,
        interval_seconds: int | None = None,
    ):
        settings = get_settings()
        self._processor = processor
        self._queue = queue
        self._interval = interval_seconds or settings.ingest_interval_seconds
        self._running = False

    async def run_once(self) -> IngestionRunResult:
        events, results = await self._processor.process_all_sources()
        published = await publish_events(self._queue, events)
        run = IngestionRunResult(results=results, events_published=published)
        logger.info(
            "Ingestion run complete",
            sources=len(results),
            failed=run.sources_failed,
            events_published=published,
        )
        return run

    async def start(self) -> None:
        """Run ingestion every interval until stop() is called."""
        self._running = True
        logger.info("Starting feed ingestion worker", interval=self._interval)

        try:
            while self._running:
                try:
                    await self.run_once()
                except Exception as e:
                    # Postgres or Redis outage; retry on the next cycle
                    logger.error("Ingestion run failed", error=str(e), exc_info=True)
                if self._running:
                    await asyncio.sleep(self._interval)
        except asyncio.CancelledError:
            logger.info("Feed ingestion worker cancelled")

    async def stop(self) -> None:
        logger.info("Stopping feed ingestion worker")
        self._running = False
