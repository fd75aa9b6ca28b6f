"""Item and enclosure models."""

from datetime import datetime
from enum import IntEnum
from typing import Optional

from pydantic import Field

from .base import DBModel


class PublicationState(IntEnum):
    """Delivery state of an item. The only transition is UNPUBLISHED -> PUBLISHED."""

    UNPUBLISHED = 0
    PUBLISHED = 1


class Item(DBModel):
    """Feed entry tracked for delivery."""

    feed_id: int = Field(..., description="Foreign key to feeds table")
    title: str = Field("", description="Entry title")
    description: str = Field("", description="Entry description")
    content: str = Field("", description="Entry content")
    link: str = Field("", description="Entry link")
    updated: str = Field("", description="Raw updated date")
    updated_parsed: Optional[datetime] = Field(None, description="Parsed updated date (UTC)")
    published: str = Field("", description="Raw publication date")
    published_parsed: Optional[datetime] = Field(None, description="Parsed publication date (UTC)")
    tg_published: PublicationState = Field(
        PublicationState.UNPUBLISHED, description="Delivery state"
    )
    itunes_author: str = ""
    itunes_block: str = ""
    itunes_duration: str = ""
    itunes_explicit: str = ""
    itunes_keywords: str = ""
    itunes_subtitle: str = ""
    itunes_summary: str = ""
    itunes_image: str = ""
    itunes_is_closed_captioned: str = ""
    itunes_episode: str = ""
    itunes_season: str = ""
    itunes_order: str = ""
    itunes_episode_type: str = ""

    @property
    def is_published(self) -> bool:
        """Whether the item completed the publish pipeline."""
        return self.tg_published == PublicationState.PUBLISHED


class Enclosure(DBModel):
    """Downloadable media attached to an item."""

    item_id: int = Field(..., description="Foreign key to items table")
    url: str = Field(..., description="Media URL")
    length: int = Field(0, description="Size in bytes", ge=0)
    type: str = Field("", description="Media type")
