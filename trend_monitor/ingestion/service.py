"""
Incremental feed ingestion.

Fetches a feed, keeps the posts published after the stored checkpoint,
turns them into IngestionEvents and advances the checkpoint.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

import structlog

from trend_monitor.ingestion.checkpoint import CheckpointService
from trend_monitor.ingestion.feed_client import FeedClient
from trend_monitor.ingestion.schemas import Checkpoint, FeedPost, IngestionEvent
from trend_monitor.mentions.schemas import SourceName

logger = structlog.get_logger(__name__)


def parse_published_at(value: str | None) -> datetime | None:
    """
    Parse a feed timestamp into an aware UTC datetime.

    Accepts RFC 822 (RSS pubDate) and ISO 8601 (Atom). Naive values are
    taken as UTC. Returns None when the value cannot be parsed.
    """
    if not value or not value.strip():
        return None
    value = value.strip()

    parsed: datetime | None = None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class FeedResult:
    """Outcome of one process_feed call."""

    events: list[IngestionEvent] = field(default_factory=list)
    new_checkpoint: Checkpoint | None = None


class IngestionService:
    """Stateless transformation of feed posts into ingestion events."""

    def transform_post(
        self,
        post: FeedPost,
        feed_url: str,
        published: datetime,
        fetched_at: datetime | None = None,
    ) -> IngestionEvent:
        return IngestionEvent(
            source=SourceName.FEED,
            source_id=post.id,
            title=post.title,
            content=post.content,
            url=post.url,
            author=post.author,
            created_at=published,
            fetched_at=fetched_at or datetime.now(timezone.utc),
            metadata={"feedUrl": feed_url},
        )

    async def process_feed(
        self,
        feed_id: str,
        url: str,
        client: FeedClient,
        checkpoint_service: CheckpointService,
        custom_user_agent: str | None = None,
    ) -> FeedResult:
        """
        Fetch one feed and emit events for posts newer than its checkpoint.

        The checkpoint is saved before the caller publishes the events, so
        a crash in between loses those posts for this feed.

        Raises:
            FeedFetchError, FeedParseError, httpx.HTTPError: Propagated
                from the client without retries
        """
        checkpoint = await checkpoint_service.get_checkpoint(feed_id)
        posts = await client.fetch_feed(url, custom_user_agent)

        since: datetime | None = None
        if checkpoint is not None:
            since = parse_published_at(checkpoint.last_published_at)
            if since is None:
                logger.warning(
                    "Ignoring unparseable checkpoint",
                    feed_id=feed_id,
                    value=checkpoint.last_published_at,
                )

        fresh: list[tuple[FeedPost, datetime]] = []
        for post in posts:
            published = parse_published_at(post.published_at)
            if published is None:
                logger.warning(
                    "Skipping post with unparseable date",
                    feed_id=feed_id,
                    post_id=post.id,
                    value=post.published_at,
                )
                continue
            if since is None or published > since:
                fresh.append((post, published))

        now = datetime.now(timezone.utc)
        events = [
            self.transform_post(post, url, published, fetched_at=now)
            for post, published in fresh
        ]

        new_checkpoint: Checkpoint | None = None
        if fresh:
            newest_post, _ = max(fresh, key=lambda pair: pair[1])
            new_checkpoint = Checkpoint(
                last_published_at=newest_post.published_at,
                last_fetched_at=now.isoformat(),
            )
            await checkpoint_service.save_checkpoint(feed_id, new_checkpoint)

        logger.info(
            "Feed processed",
            feed_id=feed_id,
            fetched=len(posts),
            new=len(events),
        )
        return FeedResult(events=events, new_checkpoint=new_checkpoint)
