"""Feed source: fetch a feed URL and map it into a FeedDocument."""

import logging
import time
from datetime import datetime
from typing import Any, List, Mapping, Optional, Protocol

import feedparser
import httpx

from ..errors import FeedFetchError
from .models import FeedDocument, FeedEnclosure, FeedEntry, FeedImage, ItunesDetails

logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    """Anything that can resolve a feed URL to a FeedDocument."""

    def fetch(self, url: str) -> FeedDocument:
        """Fetch and parse a feed. Raises FeedFetchError on failure."""
        ...


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parsed_time(value: Optional[time.struct_time]) -> Optional[datetime]:
    # feedparser normalizes dates to UTC struct_time
    if not value:
        return None
    try:
        return datetime(*value[:6])
    except (TypeError, ValueError):
        return None


def _image(data: Optional[Mapping[str, Any]]) -> Optional[FeedImage]:
    if not data:
        return None
    url = data.get("href") or data.get("url") or ""
    if not url:
        return None
    return FeedImage(url=url, title=_text(data.get("title")))


def _itunes(entry: Mapping[str, Any]) -> Optional[ItunesDetails]:
    image = entry.get("image") or {}
    details = ItunesDetails(
        author=_text(entry.get("author")),
        block=_text(entry.get("itunes_block")),
        duration=_text(entry.get("itunes_duration")),
        explicit=_text(entry.get("itunes_explicit")),
        keywords=_text(entry.get("itunes_keywords")),
        subtitle=_text(entry.get("subtitle")),
        summary=_text(entry.get("summary")),
        image=_text(image.get("href")) if isinstance(image, Mapping) else "",
        is_closed_captioned=_text(entry.get("itunes_isclosedcaptioned")),
        episode=_text(entry.get("itunes_episode")),
        season=_text(entry.get("itunes_season")),
        order=_text(entry.get("itunes_order")),
        episode_type=_text(entry.get("itunes_episodetype")),
    )
    if not any(details.model_dump().values()):
        return None
    return details


def _enclosures(entry: Mapping[str, Any]) -> List[FeedEnclosure]:
    enclosures = []
    for enclosure in entry.get("enclosures", []):
        url = enclosure.get("href") or enclosure.get("url")
        if not url:
            continue
        enclosures.append(
            FeedEnclosure(
                url=url,
                length=enclosure.get("length"),
                type=_text(enclosure.get("type")),
            )
        )
    return enclosures


def _entry(entry: Mapping[str, Any]) -> FeedEntry:
    content = ""
    if entry.get("content"):
        content = _text(entry["content"][0].get("value"))

    return FeedEntry(
        title=_text(entry.get("title")),
        description=_text(entry.get("summary") or entry.get("description")),
        content=content,
        link=_text(entry.get("link")),
        updated=_text(entry.get("updated")),
        updated_parsed=_parsed_time(entry.get("updated_parsed")),
        published=_text(entry.get("published")),
        published_parsed=_parsed_time(entry.get("published_parsed")),
        itunes=_itunes(entry),
        enclosures=_enclosures(entry),
    )


def parse_document(raw: bytes, url: str) -> FeedDocument:
    """Parse raw feed bytes into a FeedDocument."""
    parsed = feedparser.parse(raw)
    channel = parsed.feed

    # feedparser flags recoverable problems too; only give up when nothing was parsed
    if parsed.bozo and not parsed.entries and not channel.get("title"):
        raise FeedFetchError(url, f"Invalid feed: {parsed.bozo_exception}")

    return FeedDocument(
        title=_text(channel.get("title")),
        description=_text(channel.get("description")),
        link=_text(channel.get("link")),
        image=_image(channel.get("image")),
        items=[_entry(entry) for entry in parsed.entries],
    )


class FeedparserSource:
    """Fetch feeds over HTTP and parse them with feedparser."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "echopan/1.0",
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize feed source."""
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client

    def _get(self, url: str) -> httpx.Response:
        headers = {"User-Agent": self.user_agent}
        if self._client is not None:
            return self._client.get(url, headers=headers, follow_redirects=True)
        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            return client.get(url, headers=headers)

    def fetch(self, url: str) -> FeedDocument:
        """Fetch and parse a single feed."""
        logger.debug("Fetching feed %s", url)
        try:
            response = self._get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FeedFetchError(url, f"HTTP error: {e}") from e

        document = parse_document(response.content, url)
        logger.debug("Fetched feed '%s' with %d items", document.title, len(document.items))
        return document
