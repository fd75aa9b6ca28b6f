"""Bounded periodic and backfill synchronization of feeds."""

import logging
from typing import Dict, Optional

from ..config import SyncConfig
from ..db import Connection, FeedStore
from ..errors import EchopanError, FeedNotFoundError, SyncError
from ..ingestion import FeedSource
from .ingestor import ItemIngestor

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Fetch feeds and hand a bounded slice of their entries to the ingestor."""

    def __init__(
        self,
        source: FeedSource,
        settings: SyncConfig,
        feeds: Optional[FeedStore] = None,
        ingestor: Optional[ItemIngestor] = None,
    ) -> None:
        """Initialize scheduler."""
        self.source = source
        self.settings = settings
        self.feeds = feeds or FeedStore()
        self.ingestor = ingestor or ItemIngestor()

    def check_all(self, conn: Connection) -> Dict[str, int]:
        """
        Ingest the newest entries of every registered feed.

        Every feed is attempted. Failures are collected and reported at the end.

        Returns:
            Totals over all successfully checked feeds

        Raises:
            SyncError: one or more feeds failed to fetch or ingest
        """
        totals = {"feeds": 0, "new": 0, "existing": 0, "enclosures": 0}
        failures: Dict[str, str] = {}

        for feed in self.feeds.get_all(conn):
            logger.info("Checking feed ID %s: %s", feed.id, feed.title)
            try:
                document = self.source.fetch(feed.feed_url)
                # Source order is kept; the head of the feed is assumed newest
                entries = document.items[: self.settings.check_limit]
                stats = self.ingestor.ingest(conn, feed, entries)
            except EchopanError as e:
                logger.error("Error checking feed '%s' (%s): %s", feed.title, feed.feed_url, e)
                failures[feed.feed_url] = str(e)
                continue

            totals["feeds"] += 1
            for key in ("new", "existing", "enclosures"):
                totals[key] += stats[key]
            logger.info(
                "Feed '%s': %d new, %d existing items",
                feed.title,
                stats["new"],
                stats["existing"],
            )

        if failures:
            raise SyncError("feed check", failures)
        return totals

    def full_sync(self, conn: Connection, feed_title: str) -> Dict[str, int]:
        """
        Backfill one feed, identified by title.

        Raises:
            FeedNotFoundError: no feed has this title
            FeedFetchError: the feed could not be fetched
            EnclosureLengthError: an entry carries a malformed enclosure length
        """
        feed = self.feeds.find_by_title(conn, feed_title)
        if feed is None:
            raise FeedNotFoundError(f"feed with title '{feed_title}' not found")

        logger.info("Full sync of feed ID %s: %s", feed.id, feed.title)
        document = self.source.fetch(feed.feed_url)
        stats = self.ingestor.ingest(conn, feed, document.items[: self.settings.full_sync_limit])
        logger.info(
            "Full sync of '%s' done: %d new, %d existing items",
            feed.title,
            stats["new"],
            stats["existing"],
        )
        return stats
