"""
Keyword matcher consumer.

Turns a batch of ingestion events into mention rows. Retries happen at
batch granularity: any unexpected persistence error fails the whole batch
so the queue redelivers it, and already-stored events are then skipped by
the (source, source_id) uniqueness.
"""

from dataclasses import dataclass

import structlog

from trend_monitor.ingestion.schemas import IngestionEvent
from trend_monitor.matching.cache import KeywordCache
from trend_monitor.matching.matcher import KeywordMatcher
from trend_monitor.mentions.repository import MentionsRepository
from trend_monitor.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


@dataclass
class BatchResult:
    processed: int = 0
    created: int = 0
    duplicates: int = 0
    unmatched: int = 0


def event_text(event: IngestionEvent) -> str:
    """Text searched for keywords: title and content."""
    if event.title:
        return f"{event.title}\n{event.content}"
    return event.content


class KeywordMatcherConsumer:
    """
    Usage:
        consumer = KeywordMatcherConsumer(cache, mentions_repo)
        result = await consumer.handle_batch(events)
    """

    def __init__(
        self,
        cache: KeywordCache,
        mentions: MentionsRepository,
        matcher: KeywordMatcher | None = None,
    ):
        self._cache = cache
        self._mentions = mentions
        self._matcher = matcher or KeywordMatcher()
        self._metrics = get_metrics()

    async def handle_batch(self, events: list[IngestionEvent]) -> BatchResult:
        """
        Match and store one batch.

        Raises:
            Exception: Any persistence error other than a duplicate mention
        """
        result = BatchResult()
        if not events:
            return result

        keywords = await self._cache.get_active_keywords()
        if not keywords:
            logger.info("No active keywords, skipping batch", size=len(events))
            return result

        for event in events:
            result.processed += 1

            matched = self._matcher.match_keywords(event_text(event), keywords)
            if not matched:
                result.unmatched += 1
                continue

            mention = await self._mentions.create_or_ignore(
                source=event.source,
                source_id=event.source_id,
                title=event.title,
                content=event.content,
                url=event.url,
                author=event.author,
                created_at=event.created_at,
                fetched_at=event.fetched_at,
                matched_keywords=matched,
            )
            created = mention is not None
            self._metrics.record_mention(str(event.source), created)
            if created:
                result.created += 1
            else:
                result.duplicates += 1

        logger.info(
            "Batch processed",
            processed=result.processed,
            created=result.created,
            duplicates=result.duplicates,
            unmatched=result.unmatched,
        )
        return result
