"""Feed and feed image models."""

from typing import Optional

from pydantic import Field

from .base import DBModel


class Image(DBModel):
    """Feed artwork. One per feed."""

    feed_id: int = Field(..., description="Foreign key to feeds table")
    url: str = Field("", description="Remote image URL")
    title: str = Field("", description="Image title")


class Feed(DBModel):
    """Registered podcast/RSS feed."""

    title: str = Field("", description="Feed title")
    description: str = Field("", description="Feed description")
    link: str = Field("", description="Website link")
    feed_url: str = Field(..., description="Source URL the feed is fetched from")
    publish_ready: bool = Field(False, description="Whether items are published automatically")
    tg_channel: int = Field(0, description="Telegram channel id")
    extra_link_enabled: bool = Field(False, description="Append extra_link to every caption")
    extra_link: str = Field("", description="Text appended to captions")
    image: Optional[Image] = Field(None, description="Feed image, loaded on demand")
