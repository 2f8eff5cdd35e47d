"""Reclaim and dead-letter settings for Redis Streams consumers."""

from dataclasses import dataclass


@dataclass
class QueueConfig:
    """
    Configuration for pending-message reclaim.

    Attributes:
        idle_timeout_ms: How long a delivered but unacknowledged message
            stays with its consumer before another consumer may claim it.
        max_delivery_attempts: Deliveries allowed before a message is moved
            to the dead letter stream.
        reclaim_batch_size: Messages claimed per XAUTOCLAIM call.
        dlq_max_length: Approximate cap on the dead letter stream.
    """

    idle_timeout_ms: int = 60_000
    max_delivery_attempts: int = 5
    reclaim_batch_size: int = 50
    dlq_max_length: int = 10_000

    # Pause after an unexpected consume error
    error_backoff_seconds: float = 1.0
