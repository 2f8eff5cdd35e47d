"""
Feed URL validation for the source management API.

Fetches a candidate feed once, parses it and returns feed metadata plus a
short preview, or a human-readable error category. Never raises for
network or parse problems.
"""

import logging
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urlparse

import httpx

from trend_monitor.ingestion.feed_parser import FeedParseError, FeedParser

logger = logging.getLogger(__name__)

VALIDATION_TIMEOUT = 10.0
PREVIEW_LIMIT = 10
PREVIEW_CONTENT_LIMIT = 300

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; TrendMonitorBot/1.0)"

_FEED_CONTENT_TYPES = (
    "application/rss+xml",
    "application/atom+xml",
    "application/xml",
    "text/xml",
    "application/rdf+xml",
)

_DNS_MARKERS = ("getaddrinfo", "name or service not known", "nodename", "name resolution")


@dataclass
class FeedMetadata:
    title: str
    description: str
    format: Literal["rss", "atom"]
    last_updated: str | None = None


@dataclass
class FeedPreviewItem:
    title: str
    link: str
    pub_date: str | None = None
    content: str | None = None


@dataclass
class FeedValidationResult:
    valid: bool
    error: str | None = None
    metadata: FeedMetadata | None = None
    preview: list[FeedPreviewItem] = field(default_factory=list)


class _HTTPStatusFailure(Exception):
    def __init__(self, status_code: int, reason: str):
        super().__init__(f"HTTP {status_code}: {reason}")
        self.status_code = status_code


def _truncate(content: str | None) -> str | None:
    if not content:
        return None
    if len(content) > PREVIEW_CONTENT_LIMIT:
        return content[: PREVIEW_CONTENT_LIMIT - 3] + "..."
    return content


def categorize_error(error: Exception) -> str:
    """Map a validation failure to a message for the dashboard."""
    if isinstance(error, httpx.TimeoutException):
        return "Network timeout - feed took too long to respond"

    if isinstance(error, httpx.ConnectError):
        message = str(error).lower()
        if any(marker in message for marker in _DNS_MARKERS):
            return "DNS error: Could not resolve hostname"
        return "Network error: Could not connect to feed URL"

    if isinstance(error, httpx.TransportError):
        return "Network error: Could not connect to feed URL"

    if isinstance(error, _HTTPStatusFailure):
        if error.status_code == 404:
            return "HTTP 404: Feed not found"
        if error.status_code == 403:
            return "HTTP 403: Access forbidden"
        if error.status_code == 401:
            return "HTTP 401: Authentication required"
        if error.status_code >= 500:
            return "HTTP 500+: Server error"
        return f"Validation error: {error}"

    if isinstance(error, FeedParseError):
        return "Invalid feed format - not valid RSS/Atom XML"

    return f"Validation error: {error}"


class FeedValidator:
    """
    Usage:
        result = await FeedValidator().validate("https://example.com/feed")
        if result.valid:
            print(result.metadata.title)
    """

    def __init__(
        self,
        default_user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = VALIDATION_TIMEOUT,
        parser: FeedParser | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._default_user_agent = default_user_agent
        self._timeout = timeout
        self._parser = parser or FeedParser()
        self._transport = transport

    async def validate(
        self, url: str, user_agent: str | None = None
    ) -> FeedValidationResult:
        parsed_url = urlparse(url or "")
        if not parsed_url.scheme or not parsed_url.netloc:
            return FeedValidationResult(valid=False, error="Invalid URL format")
        if parsed_url.scheme not in ("http", "https"):
            return FeedValidationResult(
                valid=False, error="URL must use HTTP or HTTPS protocol"
            )

        try:
            body = await self._fetch(url, user_agent)
            document = self._parser.parse_document(body)
        except (httpx.HTTPError, _HTTPStatusFailure, FeedParseError) as e:
            logger.info("Feed validation failed for %s: %s", url, e)
            return FeedValidationResult(valid=False, error=categorize_error(e))

        return FeedValidationResult(
            valid=True,
            metadata=self._extract_metadata(document),
            preview=self._extract_preview(document),
        )

    async def _fetch(self, url: str, user_agent: str | None) -> bytes:
        headers = {
            "User-Agent": user_agent or self._default_user_agent,
            "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml, */*",
        }
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await client.get(url, headers=headers)

        if not response.is_success:
            raise _HTTPStatusFailure(response.status_code, response.reason_phrase)

        content_type = response.headers.get("content-type", "").lower()
        if not any(t in content_type for t in _FEED_CONTENT_TYPES):
            logger.warning("Unexpected content-type %r for %s", content_type, url)

        return response.content

    @staticmethod
    def _extract_metadata(document) -> FeedMetadata:
        feed = document.get("feed", {})
        version = document.get("version", "") or ""
        title = (feed.get("title") or "").strip() or "Untitled Feed"
        description = (
            feed.get("subtitle") or feed.get("description") or ""
        ).strip() or "No description available"
        return FeedMetadata(
            title=title,
            description=description,
            format="atom" if version.startswith("atom") else "rss",
            last_updated=feed.get("updated") or feed.get("published"),
        )

    def _extract_preview(self, document) -> list[FeedPreviewItem]:
        items = self._parser.items_from(document)[:PREVIEW_LIMIT]
        return [
            FeedPreviewItem(
                title=item.title.strip() or "Untitled",
                link=item.link or item.id,
                pub_date=item.published_at or None,
                content=_truncate(item.content),
            )
            for item in items
        ]
