"""Tests for the publish pipeline."""
from datetime import datetime

import httpx
import pytest

from echopan.config import PublishConfig, TelegramConfig
from echopan.errors import ConfigurationError, DeliveryError, DownloadError, FeedNotFoundError
from echopan.models import Enclosure, Item, PublicationState
from echopan.publishing import EnclosureDownloader, ItemOutcome, PublishPipeline

from factories import FakeDownloader, FakeNotifier


@pytest.fixture
def downloads(tmp_path):
    path = tmp_path / "downloads"
    path.mkdir()
    return path


def _pipeline(downloader, notifier=None, sleeps=None, **settings):
    return PublishPipeline(
        PublishConfig(**settings),
        downloader,
        notifier=notifier,
        sleep=(sleeps.append if sleeps is not None else lambda seconds: None),
    )


def _item(conn, items, feed, title="Episode", published=None, subtitle="About it"):
    return items.create(
        conn,
        Item(feed_id=feed.id, title=title, published_parsed=published, itunes_subtitle=subtitle),
    )


def test_process_item_publishes_and_cleans_up(conn, items, make_feed, downloads):
    """A delivered item should be marked published and its file removed."""
    feed = make_feed(tg_channel=-1001)
    item = _item(conn, items, feed)
    notifier = FakeNotifier()

    outcome = _pipeline(FakeDownloader(downloads), notifier).process_item(conn, feed, item)

    assert outcome == ItemOutcome.PUBLISHED
    channel, payload, caption = notifier.sent[0]
    assert channel == -1001
    assert payload.filename == "*Episode*.mp3"
    assert payload.mime_type == "audio/mpeg"
    assert caption == "*Episode*\n\nAbout it"
    assert items.get_by_id(conn, item.id).tg_published == PublicationState.PUBLISHED
    assert list(downloads.iterdir()) == []


def test_process_item_without_enclosure(conn, items, make_feed, downloads):
    """An item without enclosure should be marked published without sending."""
    feed = make_feed()
    item = _item(conn, items, feed)
    notifier = FakeNotifier()

    outcome = _pipeline(FakeDownloader(downloads, missing=True), notifier).process_item(
        conn, feed, item
    )

    assert outcome == ItemOutcome.NO_ENCLOSURE
    assert notifier.sent == []
    assert items.get_by_id(conn, item.id).is_published


def test_process_item_download_failure_marks_published(conn, items, make_feed, downloads):
    """A failed download should still mark the item published."""
    feed = make_feed()
    item = _item(conn, items, feed)
    notifier = FakeNotifier()
    downloader = FakeDownloader(downloads, error=DownloadError("bad status 404"))

    outcome = _pipeline(downloader, notifier).process_item(conn, feed, item)

    assert outcome == ItemOutcome.DOWNLOAD_FAILED
    assert notifier.sent == []
    assert items.get_by_id(conn, item.id).is_published


def test_process_item_retryable_failure(conn, items, make_feed, downloads):
    """A generic delivery error should leave the item unpublished and remove the file."""
    feed = make_feed()
    item = _item(conn, items, feed)
    notifier = FakeNotifier(error=DeliveryError("Timed out"))

    outcome = _pipeline(FakeDownloader(downloads), notifier).process_item(conn, feed, item)

    assert outcome == ItemOutcome.RETRY
    assert items.get_by_id(conn, item.id).tg_published == PublicationState.UNPUBLISHED
    assert list(downloads.iterdir()) == []


@pytest.mark.parametrize(
    "message",
    [
        "Request Entity Too Large",
        "File too large. Check telegram api limits",
        "Bad Request: text must be encoded in UTF-8",
    ],
)
def test_publish_swallows_non_retryable_errors(conn, items, make_feed, downloads, message):
    """Oversized files and bad encodings should count as handled."""
    feed = make_feed()
    item = _item(conn, items, feed)
    pipeline = _pipeline(FakeDownloader(downloads), FakeNotifier(error=DeliveryError(message)))

    assert pipeline.publish(feed, item, downloads / "x.mp3") is None
    assert pipeline.process_item(conn, feed, item) == ItemOutcome.PUBLISHED
    assert items.get_by_id(conn, item.id).is_published


def test_publish_returns_retryable_error(make_feed, downloads):
    """Other delivery errors should be returned to the caller."""
    feed = make_feed()
    error = DeliveryError("Bad Gateway")
    pipeline = _pipeline(FakeDownloader(downloads), FakeNotifier(error=error))

    assert pipeline.publish(feed, Item(id=1, feed_id=feed.id, title="x"), downloads / "x.mp3") is error


def test_missing_token_is_configuration_error(conn, items, make_feed, downloads):
    """Without a token, publishing should stop with the file kept and the item unpublished."""
    feed = make_feed()
    item = _item(conn, items, feed)
    pipeline = PublishPipeline(
        PublishConfig(), FakeDownloader(downloads), telegram=TelegramConfig(token=None)
    )

    with pytest.raises(ConfigurationError):
        pipeline.process_item(conn, feed, item)

    assert items.get_by_id(conn, item.id).tg_published == PublicationState.UNPUBLISHED
    assert [p.name for p in downloads.iterdir()] == [f"item-{item.id}.mp3"]


def test_rejected_token_propagates(conn, items, make_feed, downloads):
    """A token rejected at send time should propagate as a configuration error."""
    feed = make_feed()
    item = _item(conn, items, feed)
    notifier = FakeNotifier(error=ConfigurationError("failed to create Telegram bot"))

    with pytest.raises(ConfigurationError):
        _pipeline(FakeDownloader(downloads), notifier).process_item(conn, feed, item)

    assert not items.get_by_id(conn, item.id).is_published


def test_publish_all_drains_ready_feeds_oldest_first(conn, items, feeds, make_feed, downloads):
    """publish_all should deliver every unpublished item of ready feeds in date order."""
    ready = make_feed("Ready", publish_ready=True)
    idle = make_feed("Idle")
    _item(conn, items, ready, "new", datetime(2024, 2, 1))
    _item(conn, items, ready, "old", datetime(2024, 1, 1))
    _item(conn, items, idle, "idle")
    notifier = FakeNotifier()
    sleeps = []

    report = _pipeline(FakeDownloader(downloads), notifier, sleeps, delay_seconds=5).publish_all(conn)

    assert [caption.split("\n")[0] for _, _, caption in notifier.sent] == ["*old*", "*new*"]
    assert report[ItemOutcome.PUBLISHED] == 2
    assert report.total == 2
    assert sleeps == [5, 5]
    assert items.unpublished(conn, ready.id) == []
    assert len(items.unpublished(conn, idle.id)) == 1


def test_publish_all_does_not_sleep_without_delivery(conn, items, make_feed, downloads):
    """Items that never reach the send step should not trigger the delay."""
    feed = make_feed(publish_ready=True)
    _item(conn, items, feed)
    sleeps = []

    report = _pipeline(FakeDownloader(downloads, missing=True), FakeNotifier(), sleeps).publish_all(conn)

    assert report[ItemOutcome.NO_ENCLOSURE] == 1
    assert sleeps == []


def test_publish_one_per_feed(conn, items, make_feed, downloads):
    """publish_one_per_feed should deliver the oldest item of each ready feed."""
    first = make_feed("First", publish_ready=True)
    second = make_feed("Second", publish_ready=True)
    make_feed("Empty", publish_ready=True)
    _item(conn, items, first, "first-old", datetime(2024, 1, 1))
    _item(conn, items, first, "first-new", datetime(2024, 1, 2))
    _item(conn, items, second, "second-only", datetime(2024, 1, 3))
    notifier = FakeNotifier()

    report = _pipeline(FakeDownloader(downloads), notifier).publish_one_per_feed(conn)

    assert report.items == ["first-old", "second-only"]
    assert [item.title for item in items.unpublished(conn, first.id)] == ["first-new"]


def test_publish_next_ignores_ready_flag(conn, items, make_feed, downloads):
    """publish_next should work on any feed by id."""
    feed = make_feed("Manual")
    _item(conn, items, feed, "only")
    notifier = FakeNotifier()

    report = _pipeline(FakeDownloader(downloads), notifier).publish_next(conn, feed.id)

    assert report.items == ["only"]
    assert len(notifier.sent) == 1


def test_publish_next_drained_feed(conn, make_feed, downloads):
    """A feed with nothing to publish should give an empty report."""
    feed = make_feed()

    report = _pipeline(FakeDownloader(downloads), FakeNotifier()).publish_next(conn, feed.id)

    assert report.total == 0


def test_publish_next_unknown_feed(conn, downloads):
    """An unknown feed id should raise FeedNotFoundError."""
    with pytest.raises(FeedNotFoundError):
        _pipeline(FakeDownloader(downloads), FakeNotifier()).publish_next(conn, 999)


def test_malformed_enclosure_url_does_not_halt_publishing(conn, items, make_feed, tmp_path):
    """A broken enclosure URL should fail that item only and let the next one run."""
    feed = make_feed(publish_ready=True)
    bad = _item(conn, items, feed, "bad", datetime(2024, 1, 1))
    _item(conn, items, feed, "good", datetime(2024, 1, 2))
    items.find_or_create_enclosure(conn, Enclosure(item_id=bad.id, url="http://[::1/ep.mp3"))
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    downloader = EnclosureDownloader(tmp_path / "downloads", client=client)

    report = _pipeline(downloader, FakeNotifier()).publish_all(conn)

    assert report[ItemOutcome.DOWNLOAD_FAILED] == 1
    assert report[ItemOutcome.NO_ENCLOSURE] == 1
    assert report.items == ["bad", "good"]
    assert items.unpublished(conn, feed.id) == []
