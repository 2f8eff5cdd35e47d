"""Keywords: the user-managed watch list that mentions are matched against."""

from trend_monitor.keywords.repository import (
    KeywordConflictError,
    KeywordsRepository,
    KeywordValidationError,
)
from trend_monitor.keywords.schemas import Keyword, KeywordStatus

__all__ = [
    "Keyword",
    "KeywordConflictError",
    "KeywordStatus",
    "KeywordValidationError",
    "KeywordsRepository",
]
