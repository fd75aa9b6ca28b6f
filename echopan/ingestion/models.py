"""Data models for fetched feed documents."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class FeedImage(BaseModel):
    """Feed-level image."""

    url: str = Field("", description="Image URL")
    title: str = Field("", description="Image title")


class FeedEnclosure(BaseModel):
    """Enclosure as published by the source, length still textual."""

    url: str = Field(..., description="Media URL")
    length: Optional[str] = Field(None, description="Length field as found in the feed")
    type: str = Field("", description="Media type")


class ItunesDetails(BaseModel):
    """Podcast metadata block of an entry."""

    author: str = ""
    block: str = ""
    duration: str = ""
    explicit: str = ""
    keywords: str = ""
    subtitle: str = ""
    summary: str = ""
    image: str = ""
    is_closed_captioned: str = ""
    episode: str = ""
    season: str = ""
    order: str = ""
    episode_type: str = ""


class FeedEntry(BaseModel):
    """Parsed feed entry."""

    title: str = Field("", description="Entry title")
    description: str = Field("", description="Entry description/summary")
    content: str = Field("", description="Entry content")
    link: str = Field("", description="Entry URL")
    updated: str = Field("", description="Raw updated date")
    updated_parsed: Optional[datetime] = Field(None, description="Parsed updated date (UTC)")
    published: str = Field("", description="Raw publication date")
    published_parsed: Optional[datetime] = Field(None, description="Parsed publication date (UTC)")
    itunes: Optional[ItunesDetails] = Field(None, description="Podcast metadata")
    enclosures: List[FeedEnclosure] = Field(default_factory=list, description="Attached media")


class FeedDocument(BaseModel):
    """Result of fetching a feed URL."""

    title: str = Field("", description="Feed title")
    description: str = Field("", description="Feed description")
    link: str = Field("", description="Website link")
    image: Optional[FeedImage] = Field(None, description="Feed image")
    items: List[FeedEntry] = Field(default_factory=list, description="Entries in source order")
