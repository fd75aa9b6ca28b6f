"""Publish pipeline: download, deliver, acknowledge and clean up items."""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config import PublishConfig, TelegramConfig
from ..db import Connection, FeedStore, ItemStore
from ..errors import DeliveryError, DownloadError, FeedNotFoundError
from ..models import Feed, Item
from .captions import audio_filename, compose_caption
from .downloader import EnclosureDownloader
from .notifier import AudioPayload, Notifier, create_notifier

logger = logging.getLogger(__name__)

# Delivery failures that retrying cannot fix; the item is treated as delivered
NON_RETRYABLE_MARKERS = {
    "Request Entity Too Large": "File {path} is too large for item '{title}': {error}",
    "File too large": "File {path} is too large for item '{title}': {error}",
    "text must be encoded in UTF-8": "Caption for item '{title}' is not UTF-8 encoded: {error}",
}


class ItemOutcome(str, Enum):
    """Result of one item's publish cycle."""

    PUBLISHED = "published"
    NO_ENCLOSURE = "no_enclosure"
    DOWNLOAD_FAILED = "download_failed"
    RETRY = "retry"


class PublishReport:
    """Per-outcome counts for a publish run."""

    def __init__(self) -> None:
        self.counts: Dict[ItemOutcome, int] = {outcome: 0 for outcome in ItemOutcome}
        self.items: List[str] = []

    def record(self, item: Item, outcome: ItemOutcome) -> None:
        """Record the outcome of one item."""
        self.counts[outcome] += 1
        self.items.append(item.title)

    @property
    def total(self) -> int:
        """Number of items processed."""
        return sum(self.counts.values())

    def __getitem__(self, outcome: ItemOutcome) -> int:
        return self.counts[outcome]


class PublishPipeline:
    """Drive unpublished items of ready feeds through delivery."""

    def __init__(
        self,
        settings: PublishConfig,
        downloader: EnclosureDownloader,
        notifier: Optional[Notifier] = None,
        telegram: Optional[TelegramConfig] = None,
        feeds: Optional[FeedStore] = None,
        items: Optional[ItemStore] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize publish pipeline.

        Args:
            settings: Publish settings
            downloader: Enclosure downloader
            notifier: Delivery backend; built from `telegram` on first use when omitted
            telegram: Telegram settings used to build the default notifier
            feeds: Feed store
            items: Item store
            sleep: Delay function used between publications
        """
        self.settings = settings
        self.downloader = downloader
        self._notifier = notifier
        self.telegram = telegram or TelegramConfig()
        self.feeds = feeds or FeedStore()
        self.items = items or ItemStore()
        self.sleep = sleep

    @property
    def notifier(self) -> Notifier:
        """Get the notifier, creating it from Telegram settings if needed."""
        if self._notifier is None:
            self._notifier = create_notifier(self.telegram)
        return self._notifier

    def publish(self, feed: Feed, item: Item, local_path: Path) -> Optional[DeliveryError]:
        """
        Deliver a downloaded item to the feed's channel.

        Returns:
            None when delivered or when the failure is non-retryable, otherwise
            the retryable DeliveryError

        Raises:
            ConfigurationError: the notifier cannot be built or its token is rejected
        """
        logger.info(
            "Publishing to telegram '%s' (Item ID: %s, Feed ID: %s)",
            item.title,
            item.id,
            item.feed_id,
        )
        notifier = self.notifier
        payload = AudioPayload(path=local_path, filename=audio_filename(item))
        caption = compose_caption(feed, item, self.settings)

        try:
            notifier.send(feed.tg_channel, payload, caption)
        except DeliveryError as e:
            message = str(e)
            for marker, template in NON_RETRYABLE_MARKERS.items():
                if marker in message:
                    logger.warning(template.format(path=local_path, title=item.title, error=message))
                    return None
            logger.error("Error sending item '%s' from feed '%s': %s", item.title, feed.title, e)
            return e

        logger.info("Successfully published item '%s' to channel %s", item.title, feed.tg_channel)
        return None

    def process_item(self, conn: Connection, feed: Feed, item: Item) -> ItemOutcome:
        """
        Run one item through download, delivery, acknowledgement and cleanup.

        Raises:
            ConfigurationError: delivery is misconfigured; the downloaded file is kept
        """
        try:
            local_path = self.downloader.download_primary_enclosure(conn, item)
        except DownloadError as e:
            # Acknowledged anyway so a dead enclosure is not retried forever
            logger.warning(
                "Error downloading episode for '%s' (feed '%s'): %s. Marking as published.",
                item.title,
                feed.title,
                e,
            )
            self.items.mark_published(conn, item)
            return ItemOutcome.DOWNLOAD_FAILED

        if local_path is None:
            logger.info("No enclosure for '%s'. Marking as published.", item.title)
            self.items.mark_published(conn, item)
            return ItemOutcome.NO_ENCLOSURE

        error = self.publish(feed, item, local_path)
        if error is None:
            self.items.mark_published(conn, item)
            outcome = ItemOutcome.PUBLISHED
        else:
            logger.info("Item '%s' left unpublished for retry", item.title)
            outcome = ItemOutcome.RETRY

        self._delete(local_path)
        return outcome

    @staticmethod
    def _delete(path: Path) -> None:
        try:
            path.unlink()
            logger.debug("Deleted %s", path)
        except FileNotFoundError:
            logger.warning("Downloaded file %s was already removed", path)

    def _run(self, conn: Connection, feed: Feed, item: Item, report: PublishReport) -> None:
        outcome = self.process_item(conn, feed, item)
        report.record(item, outcome)
        if outcome in (ItemOutcome.PUBLISHED, ItemOutcome.RETRY):
            logger.info("Sleeping for %s seconds", self.settings.delay_seconds)
            self.sleep(self.settings.delay_seconds)

    def publish_all(self, conn: Connection) -> PublishReport:
        """Publish every unpublished item of every ready feed, oldest first."""
        report = PublishReport()
        for feed in self.feeds.get_ready(conn):
            items = self.items.unpublished(conn, feed.id)
            logger.info("Feed '%s': %d unpublished items", feed.title, len(items))
            for item in items:
                self._run(conn, feed, item, report)
        return report

    def publish_one_per_feed(self, conn: Connection) -> PublishReport:
        """Publish the oldest unpublished item of each ready feed."""
        report = PublishReport()
        for feed in self.feeds.get_ready(conn):
            item = self.items.first_unpublished(conn, feed.id)
            if item is None:
                logger.info("No unpublished items found for '%s'", feed.title)
                continue
            self._run(conn, feed, item, report)
        return report

    def publish_next(self, conn: Connection, feed_id: int) -> PublishReport:
        """
        Publish the oldest unpublished item of one feed, ready or not.

        Raises:
            FeedNotFoundError: no feed has this id
        """
        feed = self.feeds.get_by_id(conn, feed_id)
        if feed is None:
            raise FeedNotFoundError(f"feed with ID {feed_id} not found")

        report = PublishReport()
        item = self.items.first_unpublished(conn, feed.id)
        if item is None:
            logger.info("No unpublished items found for '%s'", feed.title)
            return report
        self._run(conn, feed, item, report)
        return report
