"""Data models for echopan."""

from .feed import Feed, Image
from .item import Enclosure, Item, PublicationState

__all__ = ["Enclosure", "Feed", "Image", "Item", "PublicationState"]
