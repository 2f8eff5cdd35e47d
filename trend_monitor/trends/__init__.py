"""Trend statistics computed from daily aggregates."""

from trend_monitor.trends.repository import TrendsRepository
from trend_monitor.trends.schemas import (
    KeywordTrend,
    SourceCount,
    TrendKeyword,
    TrendPoint,
    TrendsOverview,
)
from trend_monitor.trends.service import TrendsService, growth_rate, is_emerging

__all__ = [
    "KeywordTrend",
    "SourceCount",
    "TrendKeyword",
    "TrendPoint",
    "TrendsOverview",
    "TrendsRepository",
    "TrendsService",
    "growth_rate",
    "is_emerging",
]
