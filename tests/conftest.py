"""Shared fixtures."""
import pytest

from echopan.config import DatabaseConfig
from echopan.db import FeedStore, ItemStore, create_schema, get_connection
from echopan.models import Feed


@pytest.fixture
def db_config(tmp_path):
    """SQLite configuration in a temporary directory."""
    return DatabaseConfig(type="sqlite", file=str(tmp_path / "echopan.db"))


@pytest.fixture
def conn(db_config):
    """Open connection to a freshly created SQLite store."""
    with get_connection(db_config) as connection:
        create_schema(connection)
        yield connection


@pytest.fixture
def feeds():
    return FeedStore()


@pytest.fixture
def items():
    return ItemStore()


@pytest.fixture
def make_feed(conn, feeds):
    """Create stored feeds."""

    def _make_feed(title="Feed", url=None, **settings):
        return feeds.create(
            conn,
            Feed(title=title, feed_url=url or f"https://example.com/{title}.xml", **settings),
        )

    return _make_feed
