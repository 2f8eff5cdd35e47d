"""Creates every table the application owns."""

import logging

from trend_monitor.aggregation.repository import AggregationRepository
from trend_monitor.keywords.repository import KeywordsRepository
from trend_monitor.mentions.repository import MentionsRepository
from trend_monitor.sources.repository import SourceConfigRepository
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)


async def create_all_tables(database: Database) -> list[str]:
    """Run each repository's idempotent DDL. Returns the table names."""
    repositories = {
        "keywords": KeywordsRepository(database),
        "mentions": MentionsRepository(database),
        "daily_aggregates": AggregationRepository(database),
        "source_configs": SourceConfigRepository(database),
    }
    for repo in repositories.values():
        await repo.create_table()

    logger.info("Schema ensured for %d tables", len(repositories))
    return list(repositories)
