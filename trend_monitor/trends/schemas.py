"""Data models returned by the trends service."""

from dataclasses import dataclass, field
from datetime import date


@dataclass
class TrendKeyword:
    keyword_id: str
    name: str
    current_period: int
    previous_period: int
    growth_rate: float
    is_emerging: bool


@dataclass
class SourceCount:
    source: str
    count: int


@dataclass
class TrendsOverview:
    top_keywords: list[TrendKeyword] = field(default_factory=list)
    emerging_keywords: list[TrendKeyword] = field(default_factory=list)
    total_mentions: int = 0
    source_breakdown: list[SourceCount] = field(default_factory=list)


@dataclass
class TrendPoint:
    date: date
    source: str
    count: int


@dataclass
class KeywordTrend:
    keyword_id: str
    name: str
    time_series: list[TrendPoint] = field(default_factory=list)
    total_mentions: int = 0
    average_per_day: float = 0.0
