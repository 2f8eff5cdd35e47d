"""Keyword matching: pure matcher, active-keyword cache and queue consumer."""

from trend_monitor.matching.cache import KeywordCache, KeywordStore
from trend_monitor.matching.consumer import BatchResult, KeywordMatcherConsumer
from trend_monitor.matching.matcher import KeywordMatcher, match_keyword, normalize_text

__all__ = [
    "BatchResult",
    "KeywordCache",
    "KeywordMatcher",
    "KeywordMatcherConsumer",
    "KeywordStore",
    "match_keyword",
    "normalize_text",
]
