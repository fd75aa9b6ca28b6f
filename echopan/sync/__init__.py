"""Feed registration and item synchronization."""

from .ingestor import ItemIngestor, build_item, parse_length
from .registrar import FeedRegistrar
from .scheduler import SyncScheduler

__all__ = [
    "FeedRegistrar",
    "ItemIngestor",
    "SyncScheduler",
    "build_item",
    "parse_length",
]
