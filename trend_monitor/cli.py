"""
Command-line interface for trend-monitor.

Usage:
    trend-monitor serve          # Run the REST API
    trend-monitor ingest         # Poll feeds on an interval
    trend-monitor ingest --once  # One ingestion run, then exit
    trend-monitor match-worker   # Consume ingestion events, write mentions
    trend-monitor aggregate      # Roll mentions up into daily aggregates
    trend-monitor init-db        # Create tables
    trend-monitor health         # Check PostgreSQL and Redis
"""

import asyncio
import signal
import sys
from typing import Any

import click

from trend_monitor.config.settings import get_settings
from trend_monitor.observability.logging import setup_logging
from trend_monitor.observability.metrics import get_metrics


def _redis_client():
    import redis.asyncio as redis

    return redis.from_url(
        str(get_settings().redis_url),
        encoding="utf-8",
        decode_responses=True,
    )


def _build_feed_processor(db, redis_client):
    from trend_monitor.ingestion.checkpoint import CheckpointService
    from trend_monitor.ingestion.feed_client import FeedClient
    from trend_monitor.ingestion.processor import FeedProcessor
    from trend_monitor.sources.repository import SourceConfigRepository

    settings = get_settings()
    return FeedProcessor(
        repository=SourceConfigRepository(
            db, max_consecutive_failures=settings.max_consecutive_failures
        ),
        client=FeedClient(
            default_user_agent=settings.feed_user_agent,
            timeout=settings.feed_fetch_timeout_seconds,
        ),
        checkpoint_service=CheckpointService(redis_client),
    )


def _install_stop_handlers(service) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(service.stop()))


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Trend Monitor - keyword trends from RSS/Atom feeds."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "trend_monitor.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command()
@click.option("--once", is_flag=True, help="Run a single ingestion pass and exit")
@click.option("--interval", default=None, type=int, help="Seconds between runs")
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
def ingest(once: bool, interval: int | None, metrics: bool) -> None:
    """Fetch enabled feeds and publish new posts to the ingestion stream."""
    from trend_monitor.ingestion.queue import IngestionQueue
    from trend_monitor.services.ingestion_service import FeedIngestionWorker
    from trend_monitor.storage.database import Database

    async def run():
        redis_client = _redis_client()
        async with Database() as db, IngestionQueue() as queue:
            worker = FeedIngestionWorker(
                _build_feed_processor(db, redis_client),
                queue,
                interval_seconds=interval,
            )
            try:
                if once:
                    result = await worker.run_once()
                    click.echo("\nIngestion Results:")
                    for r in result.results:
                        line = f"  {r.source_name}: {r.events_count} new"
                        if r.error:
                            click.echo(click.style(f"{line} (error: {r.error})", fg="red"))
                        else:
                            click.echo(line)
                    click.echo(f"  Events published: {result.events_published}")
                    return

                if metrics:
                    get_metrics().start_server()
                _install_stop_handlers(worker)
                await worker.start()
            finally:
                await redis_client.aclose()

    asyncio.run(run())


@main.command("match-worker")
@click.option("--batch-size", default=None, type=int, help="Events per batch")
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
def match_worker(batch_size: int | None, metrics: bool) -> None:
    """Consume ingestion events and write keyword mentions."""
    from trend_monitor.ingestion.queue import IngestionQueue
    from trend_monitor.keywords.repository import KeywordsRepository
    from trend_monitor.matching.cache import KeywordCache
    from trend_monitor.matching.consumer import KeywordMatcherConsumer
    from trend_monitor.mentions.repository import MentionsRepository
    from trend_monitor.services.matcher_service import MatcherWorker
    from trend_monitor.storage.database import Database

    settings = get_settings()

    async def run():
        if metrics:
            get_metrics().start_server()

        redis_client = _redis_client()
        async with Database() as db, IngestionQueue() as queue:
            cache = KeywordCache(
                redis_client,
                KeywordsRepository(db),
                ttl_seconds=settings.keyword_cache_ttl_seconds,
            )
            worker = MatcherWorker(
                queue,
                KeywordMatcherConsumer(cache, MentionsRepository(db)),
                batch_size=batch_size,
            )
            _install_stop_handlers(worker)
            try:
                await worker.start()
            finally:
                await redis_client.aclose()

    asyncio.run(run())


@main.command()
@click.option("--lookback-days", default=None, type=int, help="Days to scan for pending dates")
@click.option("--date", "target_date", default=None, type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Recompute one date, pending or not")
@click.option("--loop", "loop_forever", is_flag=True, help="Repeat every aggregation interval")
def aggregate(lookback_days: int | None, target_date: Any, loop_forever: bool) -> None:
    """Roll mentions up into daily aggregates.

    Designed for cron scheduling: 15 * * * * trend-monitor aggregate

    Example:
        trend-monitor aggregate                     # Pending dates, default lookback
        trend-monitor aggregate --date 2026-01-20   # Recompute one day
        trend-monitor aggregate --loop              # Long-running
    """
    import structlog

    from trend_monitor.aggregation.repository import AggregationRepository
    from trend_monitor.aggregation.service import AggregationService
    from trend_monitor.storage.database import Database

    logger = structlog.get_logger()
    settings = get_settings()
    lookback = lookback_days or settings.aggregation_lookback_days

    async def run():
        async with Database() as db:
            repo = AggregationRepository(db)
            service = AggregationService(repo)

            if target_date:
                day = target_date.date()
                count = await service.aggregate_date(day)
                click.echo(f"Aggregated {count} rows for {day}")
                for row in await repo.list_for_date(day):
                    click.echo(f"  {row.keyword_id} [{row.source}]: {row.mentions_count}")
                return

            while True:
                try:
                    summary = await service.run_aggregation(lookback)
                except Exception as e:
                    if not loop_forever:
                        raise
                    logger.error("Aggregation run failed", error=str(e), exc_info=True)
                    await asyncio.sleep(settings.aggregation_interval_seconds)
                    continue
                click.echo(f"\nAggregation Results (lookback {lookback} days):")
                click.echo(f"  Dates processed:  {len(summary.dates_processed)}")
                for day in summary.dates_processed:
                    click.echo(f"    - {day.isoformat()}")
                click.echo(f"  Total aggregates: {summary.total_aggregates}")

                if not loop_forever:
                    return
                await asyncio.sleep(settings.aggregation_interval_seconds)

    asyncio.run(run())


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from trend_monitor.storage.database import Database
    from trend_monitor.storage.schema import create_all_tables

    async def run():
        async with Database() as db:
            tables = await create_all_tables(db)
        click.echo(f"Database initialized successfully ({', '.join(tables)})")

    asyncio.run(run())


@main.command()
def health() -> None:
    """Check health of PostgreSQL and Redis."""
    import structlog
    logger = structlog.get_logger()

    async def check() -> bool:
        results: dict[str, bool] = {}

        try:
            from trend_monitor.ingestion.queue import IngestionQueue
            async with IngestionQueue() as queue:
                results["redis"] = await queue.health_check()
        except Exception as e:
            results["redis"] = False
            logger.error("Redis health check failed", error=str(e))

        try:
            from trend_monitor.storage.database import Database
            async with Database() as db:
                results["postgres"] = await db.health_check()
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)
        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))
        click.echo("-" * 40)

        return all(results.values())

    if asyncio.run(check()):
        click.echo(click.style("All core services healthy!", fg="green"))
        sys.exit(0)
    click.echo(click.style("Some services unhealthy!", fg="red"))
    sys.exit(1)


if __name__ == "__main__":
    main()
