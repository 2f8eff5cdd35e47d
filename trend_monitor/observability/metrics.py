"""
Prometheus metrics for the ingestion, matching and aggregation pipeline.

Defines and exposes metrics for:
- Feed fetch outcomes and latency
- Events published to the ingestion stream
- Mentions created and duplicates skipped
- Daily aggregate rows written
- Source auto-disables

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from trend_monitor.config.settings import get_settings

logger = logging.getLogger(__name__)

# Feed fetches are slow network calls, so the buckets start higher than usual
FETCH_LATENCY_BUCKETS = (0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the trend-monitor pipeline.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_feed_fetch(status="success", latency=0.42)
        metrics.mentions_created.labels(source="feed").inc()
    """

    def __init__(self):
        self.feed_fetches = Counter(
            "trend_monitor_feed_fetches_total",
            "Total feed fetch attempts",
            ["status"],  # success, error
        )

        self.feed_fetch_latency = Histogram(
            "trend_monitor_feed_fetch_latency_seconds",
            "Time to fetch, parse and filter a feed",
            buckets=FETCH_LATENCY_BUCKETS,
        )

        self.events_published = Counter(
            "trend_monitor_events_published_total",
            "Ingestion events published to the stream",
        )

        self.sources_disabled = Counter(
            "trend_monitor_sources_auto_disabled_total",
            "Sources disabled after repeated consecutive failures",
        )

        self.mentions_created = Counter(
            "trend_monitor_mentions_created_total",
            "Mentions written by the keyword matcher",
            ["source"],
        )

        self.mentions_duplicate = Counter(
            "trend_monitor_mentions_duplicate_total",
            "Mentions skipped because (source, source_id) already existed",
            ["source"],
        )

        self.batches_failed = Counter(
            "trend_monitor_matcher_batches_failed_total",
            "Matcher batches left unacknowledged after an error",
        )

        self.queue_reclaimed = Counter(
            "trend_monitor_queue_reclaimed_total",
            "Pending messages reclaimed after the idle timeout",
            ["queue"],
        )

        self.queue_dead_lettered = Counter(
            "trend_monitor_queue_dead_lettered_total",
            "Messages moved to the dead letter stream after max deliveries",
            ["queue"],
        )

        self.aggregates_written = Counter(
            "trend_monitor_aggregates_written_total",
            "Daily aggregate rows upserted",
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    def record_feed_fetch(self, status: str, latency: float | None = None) -> None:
        """
        Record the outcome of one source fetch.

        Args:
            status: success or error
            latency: Optional fetch latency in seconds
        """
        self.feed_fetches.labels(status=status).inc()
        if latency is not None:
            self.feed_fetch_latency.observe(latency)

    def record_mention(self, source: str, created: bool) -> None:
        """Record a mention insert attempt."""
        if created:
            self.mentions_created.labels(source=source).inc()
        else:
            self.mentions_duplicate.labels(source=source).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get or create the global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
