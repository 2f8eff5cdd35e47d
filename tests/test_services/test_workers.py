"""Tests for the ingestion and matcher workers."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from trend_monitor.ingestion.processor import ProcessResult
from trend_monitor.ingestion.queue import IngestionQueue, QueuedEvent
from trend_monitor.matching.consumer import BatchResult
from trend_monitor.services.ingestion_service import (
    FeedIngestionWorker,
    IngestionRunResult,
    publish_events,
)
from trend_monitor.services.matcher_service import MatcherWorker


@pytest.fixture
def queue() -> AsyncMock:
    queue = AsyncMock()
    queue.publish_batch = AsyncMock(return_value=["1-0"])
    queue.ack_many = AsyncMock(return_value=1)
    return queue


class TestPublishEvents:
    @pytest.mark.asyncio
    async def test_publishes_batch(self, queue, sample_event):
        assert await publish_events(queue, [sample_event]) == 1
        queue.publish_batch.assert_awaited_once_with([sample_event])

    @pytest.mark.asyncio
    async def test_nothing_to_publish(self, queue):
        assert await publish_events(queue, []) == 0
        queue.publish_batch.assert_not_called()


class TestFeedIngestionWorker:
    @pytest.mark.asyncio
    async def test_run_once(self, queue, sample_event):
        processor = MagicMock()
        processor.process_all_sources = AsyncMock(
            return_value=(
                [sample_event],
                [
                    ProcessResult("a", "A", events_count=1, events=[sample_event]),
                    ProcessResult("b", "B", error="HTTP 500"),
                ],
            )
        )
        worker = FeedIngestionWorker(processor, queue, interval_seconds=60)

        run = await worker.run_once()

        assert run.events_published == 1
        assert run.sources_failed == 1
        queue.publish_batch.assert_awaited_once_with([sample_event])

    @pytest.mark.asyncio
    async def test_start_survives_failed_run(self, queue):
        processor = MagicMock()
        worker = FeedIngestionWorker(processor, queue, interval_seconds=60)
        runs = []

        async def process_all_sources():
            runs.append(len(runs) + 1)
            if len(runs) == 1:
                raise ConnectionError("postgres restarting")
            await worker.stop()
            return [], []

        processor.process_all_sources = process_all_sources

        with patch(
            "trend_monitor.services.ingestion_service.asyncio.sleep", AsyncMock()
        ) as sleep:
            await worker.start()

        assert runs == [1, 2]
        sleep.assert_awaited_once_with(60)

    def test_run_result_to_dict(self):
        run = IngestionRunResult(
            results=[ProcessResult("a", "A", events_count=2)], events_published=2
        )

        assert run.to_dict() == {
            "sources": [
                {
                    "source_id": "a",
                    "source_name": "A",
                    "events_count": 2,
                    "checkpoint": None,
                    "error": None,
                }
            ],
            "events_published": 2,
            "sources_failed": 0,
        }


class TestMatcherWorker:
    @pytest.fixture
    def batch(self, sample_event) -> list[QueuedEvent]:
        return [
            QueuedEvent(message_id="1-0", event=sample_event),
            QueuedEvent(message_id="2-0", event=sample_event),
        ]

    @pytest.mark.asyncio
    async def test_successful_batch_is_acked(self, queue, batch):
        consumer = MagicMock()
        consumer.handle_batch = AsyncMock(return_value=BatchResult(processed=2, created=1))
        worker = MatcherWorker(queue, consumer, batch_size=10, block_ms=100)

        result = await worker.process_batch(batch)

        assert result.created == 1
        assert len(consumer.handle_batch.call_args[0][0]) == 2
        queue.ack_many.assert_awaited_once_with(["1-0", "2-0"])

    @pytest.mark.asyncio
    async def test_failed_batch_stays_pending(self, queue, batch):
        consumer = MagicMock()
        consumer.handle_batch = AsyncMock(side_effect=RuntimeError("db down"))
        worker = MatcherWorker(queue, consumer, batch_size=10, block_ms=100)

        result = await worker.process_batch(batch)

        assert result is None
        queue.ack_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_start_stops_after_stop(self, batch):
        consumer = MagicMock()
        consumer.handle_batch = AsyncMock(return_value=BatchResult(processed=2))
        queue = MagicMock()
        queue.ack_many = AsyncMock()
        worker = MatcherWorker(queue, consumer, batch_size=10, block_ms=100)

        async def batches(count, block_ms, running):
            yield batch
            await worker.stop()
            yield batch
            yield batch

        queue.consume_batches = batches

        await worker.start()

        assert consumer.handle_batch.await_count == 2

    @pytest.mark.asyncio
    async def test_stop_ends_idle_worker(self):
        queue = IngestionQueue(
            redis_url="redis://localhost:6379/1",
            stream_name="test_events",
            consumer_group="test_matchers",
        )
        queue._redis = AsyncMock()
        queue._redis.xautoclaim.return_value = ["0-0", [], []]
        queue._consumer_name = "matcher_abc123"
        queue._stream_config = queue._get_stream_config()
        consumer = MagicMock()
        consumer.handle_batch = AsyncMock()
        worker = MatcherWorker(queue, consumer, batch_size=10, block_ms=100)
        reads = []

        async def empty_read(**kwargs):
            reads.append(kwargs["block"])
            if len(reads) == 3:
                await worker.stop()
            return []

        queue._redis.xreadgroup.side_effect = empty_read

        await worker.start()

        assert reads == [100, 100, 100]
        consumer.handle_batch.assert_not_called()
