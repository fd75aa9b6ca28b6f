"""Caption and filename composition for published audio."""

from ..config import PublishConfig
from ..models import Feed, Item


def compose_caption(feed: Feed, item: Item, settings: PublishConfig) -> str:
    """
    Build the Markdown caption for an item.

    The subtitle is truncated to ``settings.caption_limit`` characters (plus an
    ellipsis), blanked for feeds listed in ``caption_suppressed_feed_ids``, and
    followed by the feed's extra link when one is enabled.
    """
    subtitle = item.itunes_subtitle
    if len(subtitle) > settings.caption_limit:
        subtitle = subtitle[: settings.caption_limit] + "..."

    if item.feed_id in settings.caption_suppressed_feed_ids:
        subtitle = ""

    if feed.extra_link_enabled:
        subtitle += "\n\n" + feed.extra_link

    return f"*{item.title}*\n\n{subtitle}"


def audio_filename(item: Item) -> str:
    """Filename shown to recipients for an item's audio."""
    return f"*{item.title}*.mp3"
