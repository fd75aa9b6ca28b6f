"""Entity store for echopan."""

from .connection import Connection, close_connection_pool, get_connection
from .feeds import FeedStore
from .init import create_schema, init_database, validate_connection
from .items import ItemStore

__all__ = [
    "Connection",
    "FeedStore",
    "ItemStore",
    "close_connection_pool",
    "create_schema",
    "get_connection",
    "init_database",
    "validate_connection",
]
