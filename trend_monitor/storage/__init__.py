"""Storage layer: PostgreSQL connection management."""

from trend_monitor.storage.database import Database

__all__ = ["Database"]
