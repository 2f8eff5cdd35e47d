"""Mentions: ingested posts that matched at least one active keyword."""

from trend_monitor.mentions.repository import MentionsRepository
from trend_monitor.mentions.schemas import Mention, SourceName

__all__ = ["Mention", "MentionsRepository", "SourceName"]
