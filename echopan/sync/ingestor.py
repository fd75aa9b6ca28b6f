"""Convert fetched feed entries into stored items and enclosures."""

import logging
import re
from typing import Dict, Iterable, Optional

from ..db import Connection, ItemStore
from ..errors import EnclosureLengthError
from ..ingestion import FeedEnclosure, FeedEntry
from ..models import Enclosure, Feed, Item, PublicationState

logger = logging.getLogger(__name__)

_UNSIGNED = re.compile(r"[0-9]+")
# Largest value a BIGINT column holds
_MAX_LENGTH = 2**63 - 1


def parse_length(enclosure: FeedEnclosure) -> int:
    """Parse an enclosure length as a base-10 unsigned integer."""
    text = enclosure.length
    if text is None or not _UNSIGNED.fullmatch(text):
        raise EnclosureLengthError(enclosure.url, text)
    value = int(text)
    if value > _MAX_LENGTH:
        raise EnclosureLengthError(enclosure.url, text)
    return value


def build_item(feed: Feed, entry: FeedEntry) -> Item:
    """Build an unpublished candidate item for a feed entry."""
    item = Item(
        feed_id=feed.id,
        title=entry.title,
        description=entry.description,
        content=entry.content,
        link=entry.link,
        updated=entry.updated,
        updated_parsed=entry.updated_parsed,
        published=entry.published,
        published_parsed=entry.published_parsed,
        tg_published=PublicationState.UNPUBLISHED,
    )
    if entry.itunes is not None:
        for field, value in entry.itunes.model_dump().items():
            setattr(item, f"itunes_{field}", value)
    return item


class ItemIngestor:
    """Persist a bounded batch of feed entries."""

    def __init__(self, items: Optional[ItemStore] = None) -> None:
        """Initialize ingestor."""
        self.items = items or ItemStore()

    def ingest(self, conn: Connection, feed: Feed, entries: Iterable[FeedEntry]) -> Dict[str, int]:
        """
        Store entries for a feed, deduplicating items by title and enclosures by URL.

        Existing items are left untouched, including their publication state.
        Processing stops at the first malformed enclosure length; everything
        written before it stays persisted.

        Returns:
            Statistics dictionary

        Raises:
            EnclosureLengthError: an enclosure length is not an unsigned integer
        """
        stats = {
            "total": 0,
            "new": 0,
            "existing": 0,
            "enclosures": 0,
        }

        for entry in entries:
            stats["total"] += 1
            item, is_new = self.items.find_or_create(conn, build_item(feed, entry))
            if is_new:
                stats["new"] += 1
                logger.debug("Created item '%s' for feed '%s'", item.title, feed.title)
            else:
                stats["existing"] += 1

            for enclosure in entry.enclosures:
                try:
                    length = parse_length(enclosure)
                except EnclosureLengthError:
                    logger.error(
                        "Error parsing enclosure length %r for URL '%s' (item '%s', feed '%s')",
                        enclosure.length,
                        enclosure.url,
                        item.title,
                        feed.title,
                    )
                    raise

                _, created = self.items.find_or_create_enclosure(
                    conn,
                    Enclosure(item_id=item.id, url=enclosure.url, length=length, type=enclosure.type),
                )
                if created:
                    stats["enclosures"] += 1

        return stats
