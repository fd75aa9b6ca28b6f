"""Feed fetching and parsing."""

from .feed_source import FeedparserSource, FeedSource, parse_document
from .models import FeedDocument, FeedEnclosure, FeedEntry, FeedImage, ItunesDetails

__all__ = [
    "FeedDocument",
    "FeedEnclosure",
    "FeedEntry",
    "FeedImage",
    "FeedSource",
    "FeedparserSource",
    "ItunesDetails",
    "parse_document",
]
