"""HTTP client that fetches a feed and returns plain-text posts."""

import logging

import httpx

from trend_monitor.ingestion.feed_parser import FeedParser
from trend_monitor.ingestion.html import html_to_text
from trend_monitor.ingestion.schemas import FeedItem, FeedPost

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class FeedFetchError(Exception):
    """Raised when a feed responds with a non-success status."""


class FeedClient:
    """
    Fetches RSS/Atom feeds over HTTP.

    The per-request timeout is the only timeout in the ingestion path;
    network errors propagate as httpx exceptions.

    Usage:
        client = FeedClient(default_user_agent="MyBot/1.0")
        posts = await client.fetch_feed("https://example.com/feed.xml")
    """

    def __init__(
        self,
        default_user_agent: str,
        timeout: float = DEFAULT_TIMEOUT,
        parser: FeedParser | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._default_user_agent = default_user_agent
        self._timeout = timeout
        self._parser = parser or FeedParser()
        self._transport = transport

    async def fetch_feed(
        self, url: str, user_agent: str | None = None
    ) -> list[FeedPost]:
        """
        Fetch and parse a feed.

        Raises:
            FeedFetchError: On a non-2xx response
            FeedParseError: If the body is not RSS/Atom
        """
        headers = {"User-Agent": user_agent or self._default_user_agent}

        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await client.get(url, headers=headers)

        if not response.is_success:
            raise FeedFetchError(
                f"Failed to fetch feed from {url}: "
                f"{response.status_code} {response.reason_phrase}"
            )

        items = self._parser.parse(response.content)
        logger.debug("Fetched %d items from %s", len(items), url)
        return [self._to_post(item) for item in items]

    @staticmethod
    def _to_post(item: FeedItem) -> FeedPost:
        return FeedPost(
            id=item.id,
            title=item.title,
            content=html_to_text(item.content),
            url=item.link,
            author=item.author,
            published_at=item.published_at,
        )
