"""Redis Streams queue primitives."""

from trend_monitor.queues.base import BaseRedisQueue, StreamConfig
from trend_monitor.queues.config import QueueConfig

__all__ = ["BaseRedisQueue", "QueueConfig", "StreamConfig"]
