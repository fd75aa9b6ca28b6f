"""Tests for feed registration and image reconciliation."""
from unittest.mock import MagicMock

import pytest

from echopan.errors import FeedFetchError, SyncError
from echopan.sync import FeedRegistrar

from factories import FakeFeedSource, make_document

URL = "https://example.com/show.xml"


def test_register_creates_feed_and_image(conn, feeds):
    """A new URL should create a feed with its image."""
    source = FakeFeedSource({URL: make_document("Show", image_url="https://img/cover.png")})

    feed = FeedRegistrar(source).register(conn, URL)

    assert feed.id is not None
    assert feed.title == "Show"
    assert feed.feed_url == URL
    assert feed.publish_ready is False
    assert feed.image.url == "https://img/cover.png"
    assert feeds.get_image(conn, feed.id).url == "https://img/cover.png"


def test_register_is_idempotent(conn, feeds):
    """Registering the same URL twice should return the same feed."""
    source = FakeFeedSource({URL: make_document("Show", image_url="https://img/cover.png")})
    registrar = FeedRegistrar(source)

    first = registrar.register(conn, URL)
    second = registrar.register(conn, URL)

    assert second.id == first.id
    assert len(feeds.get_all(conn)) == 1


def test_register_prefers_existing_title(conn, feeds):
    """A known title under a new URL should resolve to the stored feed."""
    new_url = "https://mirror.example/show.xml"
    source = FakeFeedSource({URL: make_document("Show"), new_url: make_document("Show")})
    registrar = FeedRegistrar(source)

    original = registrar.register(conn, URL)
    resolved = registrar.register(conn, new_url)

    assert resolved.id == original.id
    assert resolved.feed_url == URL
    assert feeds.find_by_url(conn, new_url) is None


def test_register_empty_title_does_not_match_by_title(conn, feeds):
    """Untitled feeds under different URLs should be separate feeds."""
    other = "https://example.com/other.xml"
    source = FakeFeedSource({URL: make_document(""), other: make_document("")})
    registrar = FeedRegistrar(source)

    first = registrar.register(conn, URL)
    second = registrar.register(conn, other)

    assert first.id != second.id


def test_register_without_image(conn, feeds):
    """A document without an image should not create one."""
    source = FakeFeedSource({URL: make_document("Show")})

    feed = FeedRegistrar(source).register(conn, URL)

    assert feed.image is None
    assert feeds.get_image(conn, feed.id) is None


def test_register_fetch_failure_creates_nothing(conn, feeds):
    """A fetch error should propagate and leave the store untouched."""
    source = FakeFeedSource({URL: FeedFetchError(URL, "timeout")})

    with pytest.raises(FeedFetchError):
        FeedRegistrar(source).register(conn, URL)

    assert feeds.get_all(conn) == []


def test_register_image_failure_still_returns_feed(conn, feeds):
    """An image write failure should be logged; the feed is still returned."""
    source = FakeFeedSource({URL: make_document("Show", image_url="https://img/cover.png")})
    registrar = FeedRegistrar(source, feeds)
    registrar.feeds.find_or_create_image = MagicMock(side_effect=RuntimeError("disk full"))

    feed = registrar.register(conn, URL)

    assert feed.id is not None
    assert feed.image is None
    assert feeds.find_by_url(conn, URL) is not None


def test_resync_updates_creates_and_deletes_images(conn, feeds):
    """resync should reconcile each feed's image with the source."""
    urls = {name: f"https://example.com/{name}.xml" for name in ("a", "b", "c")}
    source = FakeFeedSource(
        {
            urls["a"]: make_document("A", image_url="https://img/a-1.png"),
            urls["b"]: make_document("B"),
            urls["c"]: make_document("C", image_url="https://img/c.png"),
        }
    )
    registrar = FeedRegistrar(source)
    a = registrar.register(conn, urls["a"])
    b = registrar.register(conn, urls["b"])
    c = registrar.register(conn, urls["c"])
    image_id = feeds.get_image(conn, a.id).id

    source.documents[urls["a"]] = make_document("A", image_url="https://img/a-2.png")
    source.documents[urls["b"]] = make_document("B", image_url="https://img/b.png")
    source.documents[urls["c"]] = make_document("C")
    registrar.resync(conn)

    updated = feeds.get_image(conn, a.id)
    assert updated.id == image_id
    assert updated.url == "https://img/a-2.png"
    assert feeds.get_image(conn, b.id).url == "https://img/b.png"
    assert feeds.get_image(conn, c.id) is None


def test_resync_continues_after_failure(conn, feeds):
    """A failing feed should be reported while the others are still updated."""
    good, bad = "https://example.com/good.xml", "https://example.com/bad.xml"
    source = FakeFeedSource({good: make_document("Good"), bad: make_document("Bad")})
    registrar = FeedRegistrar(source)
    registrar.register(conn, bad)
    good_feed = registrar.register(conn, good)

    source.documents[bad] = FeedFetchError(bad, "gone")
    source.documents[good] = make_document("Good", image_url="https://img/good.png")

    with pytest.raises(SyncError) as exc_info:
        registrar.resync(conn)

    assert list(exc_info.value.failures) == [bad]
    assert feeds.get_image(conn, good_feed.id).url == "https://img/good.png"
