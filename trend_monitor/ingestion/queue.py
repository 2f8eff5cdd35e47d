"""
Redis Streams queue carrying IngestionEvents from the feed processor to
the keyword matcher.

Streams:
    - 'ingestion_events': main stream, one JSON event per message
    - 'ingestion_events:dlq': dead letter stream

Consumer group:
    - 'keyword_matchers'
"""

import logging
from dataclasses import dataclass

from trend_monitor.config.settings import get_settings
from trend_monitor.ingestion.schemas import IngestionEvent
from trend_monitor.queues.base import BaseRedisQueue, StreamConfig
from trend_monitor.queues.config import QueueConfig

logger = logging.getLogger(__name__)


@dataclass
class QueuedEvent:
    """An event read from the stream with its ID for acknowledgment."""

    message_id: str
    event: IngestionEvent
    delivery_count: int = 1


class IngestionQueue(BaseRedisQueue[QueuedEvent]):
    """
    Usage:
        async with IngestionQueue() as queue:
            await queue.publish_batch(events)

            async for batch in queue.consume_batches(count=50):
                ...
                await queue.ack_many([m.message_id for m in batch])
    """

    def __init__(
        self,
        redis_url: str | None = None,
        stream_name: str | None = None,
        consumer_group: str | None = None,
        max_stream_length: int | None = None,
        queue_config: QueueConfig | None = None,
    ):
        settings = get_settings()
        super().__init__(
            redis_url=redis_url or str(settings.redis_url),
            queue_config=queue_config,
        )
        self._stream_name = stream_name or settings.ingestion_stream_name
        self._consumer_group = consumer_group or settings.ingestion_consumer_group
        self._max_stream_length = (
            max_stream_length or settings.ingestion_max_stream_length
        )

    def _get_stream_config(self) -> StreamConfig:
        return StreamConfig(
            stream_name=self._stream_name,
            consumer_group=self._consumer_group,
            dlq_stream_name=f"{self._stream_name}:dlq",
            max_stream_length=self._max_stream_length,
        )

    def _get_consumer_prefix(self) -> str:
        return "matcher"

    def _parse_job(
        self, message_id: str, fields: dict[str, str], delivery_count: int
    ) -> QueuedEvent:
        return QueuedEvent(
            message_id=message_id,
            event=IngestionEvent.from_json(fields["data"]),
            delivery_count=delivery_count,
        )

    async def publish(self, event: IngestionEvent) -> str:
        """Add one event to the stream. Returns the Redis message ID."""
        message_id = await self._publish_fields({"data": event.to_json()})
        logger.debug("Published event %s as %s", event.source_id, message_id)
        return str(message_id)

    async def publish_batch(self, events: list[IngestionEvent]) -> list[str]:
        """Publish many events in one pipeline round trip."""
        results = await self._publish_many([{"data": e.to_json()} for e in events])
        if results:
            logger.info("Published %d events to %s", len(results), self._stream_name)
        return [str(r) for r in results]
