"""Per-feed checkpoints stored in Redis."""

import json
import logging

import redis.asyncio as redis

from trend_monitor.ingestion.schemas import Checkpoint

logger = logging.getLogger(__name__)

CHECKPOINT_KEY_PREFIX = "checkpoint:feed:"


def checkpoint_key(feed_id: str) -> str:
    return f"{CHECKPOINT_KEY_PREFIX}{feed_id}"


class CheckpointService:
    """
    Reads and writes feed checkpoints.

    Values are JSON documents with no expiry. Concurrent writers for the
    same feed are last-write-wins.
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    async def get_checkpoint(self, feed_id: str) -> Checkpoint | None:
        value = await self._redis.get(checkpoint_key(feed_id))
        if not value:
            return None
        return Checkpoint.from_dict(json.loads(value))

    async def save_checkpoint(self, feed_id: str, checkpoint: Checkpoint) -> None:
        await self._redis.set(checkpoint_key(feed_id), json.dumps(checkpoint.to_dict()))
        logger.debug(
            "Saved checkpoint for %s at %s", feed_id, checkpoint.last_published_at
        )
