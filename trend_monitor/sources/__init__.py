"""Source configuration: feed URLs, their fetch health and validation."""

from trend_monitor.sources.repository import SourceConfigRepository, SourceValidationError
from trend_monitor.sources.schemas import (
    FeedSourceConfig,
    SourceConfig,
    SourceType,
    health_status,
)

__all__ = [
    "FeedSourceConfig",
    "SourceConfig",
    "SourceConfigRepository",
    "SourceType",
    "SourceValidationError",
    "health_status",
]
