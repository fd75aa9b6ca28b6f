"""Feed registration and feed metadata refresh."""

import logging
from typing import Dict, Optional

from ..db import Connection, FeedStore
from ..errors import EchopanError, SyncError
from ..ingestion import FeedDocument, FeedSource
from ..models import Feed, Image

logger = logging.getLogger(__name__)


class FeedRegistrar:
    """Create feeds from fetched documents and keep their images current."""

    def __init__(self, source: FeedSource, feeds: Optional[FeedStore] = None) -> None:
        """Initialize registrar."""
        self.source = source
        self.feeds = feeds or FeedStore()

    def _resolve(self, conn: Connection, document: FeedDocument, feed_url: str) -> Feed:
        """Find the feed by URL, then by title, else create it."""
        existing = self.feeds.find_by_url(conn, feed_url)
        if existing:
            logger.info("Feed with URL %s already exists with ID %s", feed_url, existing.id)
            return existing

        if document.title:
            existing = self.feeds.find_by_title(conn, document.title)
            if existing:
                # URL changed but title is stable: the stored record wins
                logger.info(
                    "Feed with title '%s' already exists with ID %s. "
                    "Provided URL '%s' differs from stored URL '%s'. Using existing feed record.",
                    document.title,
                    existing.id,
                    feed_url,
                    existing.feed_url,
                )
                return existing

        logger.info("Creating feed '%s' with URL '%s'", document.title, feed_url)
        return self.feeds.create(
            conn,
            Feed(
                title=document.title,
                description=document.description,
                link=document.link,
                feed_url=feed_url,
            ),
        )

    def register(self, conn: Connection, feed_url: str) -> Feed:
        """
        Register a feed URL.

        Raises:
            FeedFetchError: the document could not be fetched; nothing is created
        """
        logger.info("Attempting to add feed from URL: %s", feed_url)
        document = self.source.fetch(feed_url)
        feed = self._resolve(conn, document, feed_url)

        if document.image is None:
            logger.info("No image found for feed: %s", document.title)
            return feed

        try:
            feed.image = self.feeds.find_or_create_image(
                conn,
                Image(feed_id=feed.id, url=document.image.url, title=document.image.title),
            )
        except Exception as e:
            # Image is optional; the feed itself is already stored
            conn.rollback()
            logger.error("Could not create or find image for feed ID %s: %s", feed.id, e)
        return feed

    def _reconcile_image(self, conn: Connection, feed: Feed, document: FeedDocument) -> None:
        existing = self.feeds.get_image(conn, feed.id)

        if document.image is not None and document.image.url:
            if existing:
                logger.info("Updating image for feed ID %s (Image ID %s)", feed.id, existing.id)
                existing.url = document.image.url
                existing.title = document.image.title
                self.feeds.update_image(conn, existing)
                feed.image = existing
            else:
                logger.info("Creating new image for feed ID %s", feed.id)
                feed.image = self.feeds.create_image(
                    conn,
                    Image(feed_id=feed.id, url=document.image.url, title=document.image.title),
                )
        elif existing:
            logger.info(
                "Parsed feed has no image for feed ID %s. Deleting image ID %s.",
                feed.id,
                existing.id,
            )
            self.feeds.delete_image(conn, existing.id)
            feed.image = None

    def resync(self, conn: Connection) -> None:
        """
        Re-fetch every feed and reconcile its image.

        Raises:
            SyncError: one or more feeds failed; the others are still updated
        """
        feeds = self.feeds.get_all(conn)
        if not feeds:
            logger.info("No feeds in the database to reinitialize.")
            return

        failures: Dict[str, str] = {}
        for feed in feeds:
            logger.info("Reinitializing feed ID %s: %s (URL: %s)", feed.id, feed.title, feed.feed_url)
            try:
                document = self.source.fetch(feed.feed_url)
                self._reconcile_image(conn, feed, document)
            except EchopanError as e:
                logger.error("Error reinitializing feed '%s' (%s): %s", feed.title, feed.feed_url, e)
                failures[feed.feed_url] = str(e)

        if failures:
            raise SyncError("feed reinitialization", failures)
