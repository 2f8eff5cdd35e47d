"""
Keyword matcher worker.

Reads ingestion events from the stream in batches and hands each batch to
the KeywordMatcherConsumer. A batch is acknowledged only after every event
in it has been handled; a failed batch stays pending and is redelivered
through the queue's reclaim path.
"""

import asyncio

import structlog

from trend_monitor.config.settings import get_settings
from trend_monitor.ingestion.queue import IngestionQueue, QueuedEvent
from trend_monitor.matching.consumer import BatchResult, KeywordMatcherConsumer
from trend_monitor.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


class MatcherWorker:
    """
    Usage:
        worker = MatcherWorker(queue, consumer)
        await worker.start()  # Runs until stopped
    """

    def __init__(
        self,
        queue: IngestionQueue,
        consumer: KeywordMatcherConsumer,
        batch_size: int | None = None,
        block_ms: int | None = None,
    ):
        settings = get_settings()
        self._queue = queue
        self._consumer = consumer
        self._batch_size = batch_size or settings.matcher_batch_size
        self._block_ms = block_ms or settings.matcher_block_ms
        self._running = False
        self._metrics = get_metrics()

    async def process_batch(self, batch: list[QueuedEvent]) -> BatchResult | None:
        """
        Handle and acknowledge one batch.

        Returns None when the batch failed and was left pending.
        """
        try:
            result = await self._consumer.handle_batch([m.event for m in batch])
        except Exception as e:
            self._metrics.batches_failed.inc()
            logger.error(
                "Batch failed, leaving it pending for redelivery",
                size=len(batch),
                first_message=batch[0].message_id if batch else None,
                error=str(e),
                exc_info=True,
            )
            return None

        await self._queue.ack_many([m.message_id for m in batch])
        return result

    async def start(self) -> None:
        """Consume batches until stop() is called."""
        self._running = True
        logger.info(
            "Starting matcher worker",
            batch_size=self._batch_size,
            block_ms=self._block_ms,
        )

        try:
            async for batch in self._queue.consume_batches(
                count=self._batch_size,
                block_ms=self._block_ms,
                running=lambda: self._running,
            ):
                await self.process_batch(batch)
                if not self._running:
                    break
        except asyncio.CancelledError:
            logger.info("Matcher worker cancelled")

    async def stop(self) -> None:
        logger.info("Stopping matcher worker")
        self._running = False
