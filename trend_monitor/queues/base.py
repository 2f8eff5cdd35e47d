"""
Batch-oriented Redis Streams queue.

Consumers read whole batches and acknowledge them in one XACK. A batch
that is never acknowledged stays in the group's pending list; once it has
been idle for ``QueueConfig.idle_timeout_ms`` the next read reclaims it
with XAUTOCLAIM before looking at new messages. A message delivered more
than ``max_delivery_attempts`` times, or one that cannot be decoded, is
copied to the dead letter stream and acknowledged.
"""

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Generic, TypeVar

import redis.asyncio as redis

from trend_monitor.observability.metrics import get_metrics
from trend_monitor.queues.config import QueueConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class StreamConfig:
    stream_name: str
    consumer_group: str
    dlq_stream_name: str
    # Approximate cap applied on every XADD
    max_stream_length: int = 100_000


class BaseRedisQueue(ABC, Generic[T]):
    """
    Subclasses name their stream and decode messages into job objects:

        _get_stream_config() -> StreamConfig
        _get_consumer_prefix() -> str
        _parse_job(message_id, fields, delivery_count) -> T
    """

    def __init__(self, redis_url: str, queue_config: QueueConfig | None = None):
        self._redis_url = redis_url
        self._queue_config = queue_config or QueueConfig()
        self._redis: redis.Redis | None = None
        self._consumer_name: str | None = None
        self._stream_config: StreamConfig | None = None

    @abstractmethod
    def _parse_job(self, message_id: str, fields: dict[str, str], delivery_count: int) -> T:
        """Decode one message; ``delivery_count`` includes the current delivery."""

    @abstractmethod
    def _get_stream_config(self) -> StreamConfig:
        ...

    @abstractmethod
    def _get_consumer_prefix(self) -> str:
        ...

    async def connect(self) -> None:
        """Open the client and create the consumer group if it is missing."""
        self._redis = redis.from_url(self._redis_url, encoding="utf-8", decode_responses=True)
        self._stream_config = self._get_stream_config()
        self._consumer_name = f"{self._get_consumer_prefix()}_{uuid.uuid4().hex[:8]}"

        stream = self._stream_config.stream_name
        group = self._stream_config.consumer_group
        try:
            await self._redis.xgroup_create(name=stream, groupname=group, id="0", mkstream=True)
            logger.info("Created consumer group %s on %s", group, stream)
        except redis.ResponseError as e:
            # BUSYGROUP: another process created it first
            if "BUSYGROUP" not in str(e):
                raise
        logger.info("Consumer %s attached to %s", self._consumer_name, stream)

    async def close(self) -> None:
        if self._redis is None:
            return
        await self._redis.aclose()
        self._redis = None

    async def __aenter__(self) -> "BaseRedisQueue[T]":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def redis(self) -> redis.Redis:
        if self._redis is None:
            raise RuntimeError("Queue is not connected; call connect() first")
        return self._redis

    @property
    def stream_config(self) -> StreamConfig:
        if self._stream_config is None:
            raise RuntimeError("Queue is not connected; call connect() first")
        return self._stream_config

    def _xadd_kwargs(self) -> dict:
        return {"maxlen": self.stream_config.max_stream_length, "approximate": True}

    async def _publish_fields(self, fields: dict[str, str]) -> str:
        return await self.redis.xadd(self.stream_config.stream_name, fields, **self._xadd_kwargs())

    async def _publish_many(self, batch: list[dict[str, str]]) -> list[str]:
        """XADD every message in one pipeline round trip."""
        if not batch:
            return []
        async with self.redis.pipeline() as pipe:
            for fields in batch:
                pipe.xadd(self.stream_config.stream_name, fields, **self._xadd_kwargs())
            return await pipe.execute()

    async def read_batch(self, count: int = 50, block_ms: int = 5000) -> list[T]:
        """
        Return up to ``count`` jobs, reclaimed ones first.

        New messages are read with XREADGROUP only when nothing was
        reclaimed, so a stuck batch is retried before fresh work.
        """
        if self._consumer_name is None:
            raise RuntimeError("Queue is not connected; call connect() first")

        reclaimed = await self._reclaim_pending(count)
        if reclaimed:
            return reclaimed

        response = await self.redis.xreadgroup(
            groupname=self.stream_config.consumer_group,
            consumername=self._consumer_name,
            streams={self.stream_config.stream_name: ">"},
            count=count,
            block=block_ms,
        )
        jobs: list[T] = []
        for _stream, entries in response or []:
            for message_id, fields in entries:
                job = await self._decode(message_id, fields, 1)
                if job is not None:
                    jobs.append(job)
        return jobs

    async def consume_batches(
        self,
        count: int = 50,
        block_ms: int = 5000,
        running: Callable[[], bool] | None = None,
    ) -> AsyncIterator[list[T]]:
        """
        Yield non-empty batches until cancelled or ``running()`` turns false.

        ``running`` is checked before every read, so an idle consumer stops
        within ``block_ms``. Redis errors are logged and retried after
        ``error_backoff_seconds``.
        """
        while running is None or running():
            try:
                batch = await self.read_batch(count=count, block_ms=block_ms)
            except asyncio.CancelledError:
                logger.info("Consumer %s cancelled", self._consumer_name)
                return
            except redis.RedisError as e:
                logger.error("Read from %s failed: %s", self.stream_config.stream_name, e)
                await asyncio.sleep(self._queue_config.error_backoff_seconds)
                continue
            if batch:
                yield batch

    async def _decode(self, message_id: str, fields: dict[str, str], delivery_count: int) -> T | None:
        try:
            return self._parse_job(message_id, fields, delivery_count)
        except Exception as e:
            logger.error("Undecodable message %s: %s", message_id, e)
            await self._dead_letter(message_id, fields, f"parse_error: {e}")
            return None

    async def _reclaim_pending(self, count: int) -> list[T]:
        stream = self.stream_config.stream_name
        try:
            # Reply: [next_start_id, [(message_id, fields), ...], [deleted_ids]]
            reply = await self.redis.xautoclaim(
                name=stream,
                groupname=self.stream_config.consumer_group,
                consumername=self._consumer_name,
                min_idle_time=self._queue_config.idle_timeout_ms,
                start_id="0-0",
                count=min(count, self._queue_config.reclaim_batch_size),
            )
        except redis.ResponseError as e:
            if "unknown command" in str(e).lower():
                logger.warning("XAUTOCLAIM unsupported (needs Redis 6.2+); pending messages are not reclaimed")
                return []
            raise

        # Entries trimmed from the stream come back with empty fields
        claimed = [(mid, fields) for mid, fields in (reply[1] if reply else []) if fields]
        if not claimed:
            return []

        logger.info("Reclaimed %d idle messages from %s", len(claimed), stream)
        deliveries = await self._get_delivery_counts([mid for mid, _ in claimed])
        limit = self._queue_config.max_delivery_attempts
        metrics = get_metrics()

        jobs: list[T] = []
        for message_id, fields in claimed:
            delivered = deliveries.get(message_id, 1)
            if delivered > limit:
                logger.warning("Message %s delivered %d times (limit %d)", message_id, delivered, limit)
                await self._dead_letter(message_id, fields, "max_retries_exceeded")
                metrics.queue_dead_lettered.labels(queue=stream).inc()
                continue
            job = await self._decode(message_id, fields, delivered)
            if job is not None:
                metrics.queue_reclaimed.labels(queue=stream).inc()
                jobs.append(job)
        return jobs

    async def _get_delivery_counts(self, message_ids: list[str]) -> dict[str, int]:
        if not message_ids:
            return {}
        entries = await self.redis.xpending_range(
            name=self.stream_config.stream_name,
            groupname=self.stream_config.consumer_group,
            min=message_ids[0],
            max=message_ids[-1],
            count=len(message_ids),
        )
        wanted = set(message_ids)
        return {e["message_id"]: e["times_delivered"] for e in entries if e["message_id"] in wanted}

    async def ack_many(self, message_ids: list[str]) -> int:
        """XACK a batch. Returns how many were still pending."""
        if not message_ids:
            return 0
        return await self.redis.xack(
            self.stream_config.stream_name,
            self.stream_config.consumer_group,
            *message_ids,
        )

    async def _dead_letter(self, message_id: str, fields: dict[str, str], reason: str) -> None:
        """Copy a message to the dead letter stream, then acknowledge it."""
        await self.redis.xadd(
            self.stream_config.dlq_stream_name,
            {
                **fields,
                "original_id": message_id,
                "error": reason,
                "failed_at": str(time.time()),
            },
            maxlen=self._queue_config.dlq_max_length,
            approximate=True,
        )
        await self.ack_many([message_id])
        logger.warning("Dead-lettered %s: %s", message_id, reason)

    async def health_check(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except (RuntimeError, redis.RedisError):
            return False
