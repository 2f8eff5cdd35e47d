"""RSS/Atom parsing on top of feedparser."""

import logging
import re

import feedparser

from trend_monitor.ingestion.schemas import FeedItem

logger = logging.getLogger(__name__)

# RSS <author> is commonly "email (Display Name)"
_AUTHOR_NAME_RE = re.compile(r"\(([^)]+)\)")


class FeedParseError(Exception):
    """Raised when a document is not recognizable as RSS or Atom."""


def _extract_author(entry) -> str | None:
    author = entry.get("author")
    if not author:
        return None
    match = _AUTHOR_NAME_RE.search(author)
    return match.group(1) if match else author


def _extract_content(entry) -> str:
    content = entry.get("content")
    if content and content[0].get("value"):
        return content[0]["value"]
    return entry.get("summary", "") or ""


class FeedParser:
    """
    Normalizes feedparser entries into FeedItem records.

    Usage:
        items = FeedParser().parse(xml)
    """

    def parse_document(self, xml: str | bytes) -> feedparser.FeedParserDict:
        """
        Parse a raw document.

        Raises:
            FeedParseError: If feedparser cannot interpret it at all
        """
        parsed = feedparser.parse(xml)
        if parsed.get("bozo") and not parsed.get("entries") and not parsed.get("version"):
            reason = parsed.get("bozo_exception")
            raise FeedParseError(f"Parse error: {reason or 'feed not recognized'}")
        return parsed

    def items_from(self, parsed: feedparser.FeedParserDict) -> list[FeedItem]:
        return [self._transform_entry(e) for e in parsed.get("entries", [])]

    def parse(self, xml: str | bytes) -> list[FeedItem]:
        """Parse a document into items. An empty feed yields an empty list."""
        return self.items_from(self.parse_document(xml))

    def _transform_entry(self, entry) -> FeedItem:
        link = entry.get("link", "") or ""
        return FeedItem(
            id=entry.get("id") or link or "",
            title=entry.get("title", "") or "",
            link=link,
            content=_extract_content(entry),
            author=_extract_author(entry),
            published_at=entry.get("published") or entry.get("updated") or "",
        )
