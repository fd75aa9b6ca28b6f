"""Item and enclosure storage."""

import logging
from typing import List, Optional, Tuple

from ..models import Enclosure, Item, PublicationState
from .connection import Connection

logger = logging.getLogger(__name__)

ITEM_COLUMNS = (
    "feed_id",
    "title",
    "description",
    "content",
    "link",
    "updated",
    "updated_parsed",
    "published",
    "published_parsed",
    "tg_published",
    "itunes_author",
    "itunes_block",
    "itunes_duration",
    "itunes_explicit",
    "itunes_keywords",
    "itunes_subtitle",
    "itunes_summary",
    "itunes_image",
    "itunes_is_closed_captioned",
    "itunes_episode",
    "itunes_season",
    "itunes_order",
    "itunes_episode_type",
)

_INSERT_ITEM_SQL = (
    f"INSERT INTO items ({', '.join(ITEM_COLUMNS)}) "
    f"VALUES ({', '.join(['%s'] * len(ITEM_COLUMNS))}) RETURNING *"
)

# Oldest first; undated items go last
UNPUBLISHED_ORDER = "ORDER BY published_parsed ASC NULLS LAST, id ASC"


class ItemStore:
    """Typed access to items and enclosures."""

    def find_by_title(self, conn: Connection, title: str) -> Optional[Item]:
        """Find item by exact title."""
        with conn.cursor() as cur:
            row = cur.execute(
                "SELECT * FROM items WHERE title = %s ORDER BY id LIMIT 1",
                (title,),
            ).fetchone()
        return Item.model_validate(row) if row else None

    def get_by_id(self, conn: Connection, item_id: int) -> Optional[Item]:
        """Get item by ID."""
        with conn.cursor() as cur:
            row = cur.execute("SELECT * FROM items WHERE id = %s", (item_id,)).fetchone()
        return Item.model_validate(row) if row else None

    def create(self, conn: Connection, item: Item) -> Item:
        """Insert a new item in the UNPUBLISHED state."""
        values = item.model_dump(include=set(ITEM_COLUMNS))
        values["tg_published"] = int(PublicationState.UNPUBLISHED)
        with conn.cursor() as cur:
            row = cur.execute(
                _INSERT_ITEM_SQL,
                tuple(values[column] for column in ITEM_COLUMNS),
            ).fetchone()
        conn.commit()
        return Item.model_validate(row)

    def find_or_create(self, conn: Connection, item: Item) -> Tuple[Item, bool]:
        """
        Resolve an item by title, creating it if missing.

        Returns:
            Tuple of (item, is_new)
        """
        existing = self.find_by_title(conn, item.title)
        if existing:
            return existing, False
        return self.create(conn, item), True

    def list_for_feed(self, conn: Connection, feed_id: int) -> List[Item]:
        """Get all items of a feed."""
        with conn.cursor() as cur:
            rows = cur.execute(
                "SELECT * FROM items WHERE feed_id = %s ORDER BY id", (feed_id,)
            ).fetchall()
        return [Item.model_validate(row) for row in rows]

    def first_unpublished(self, conn: Connection, feed_id: int) -> Optional[Item]:
        """Get the oldest unpublished item of a feed."""
        with conn.cursor() as cur:
            row = cur.execute(
                f"""
                SELECT * FROM items
                WHERE feed_id = %s AND tg_published = %s
                {UNPUBLISHED_ORDER}
                LIMIT 1
                """,
                (feed_id, int(PublicationState.UNPUBLISHED)),
            ).fetchone()
        return Item.model_validate(row) if row else None

    def unpublished(self, conn: Connection, feed_id: int) -> List[Item]:
        """Get all unpublished items of a feed, oldest first."""
        with conn.cursor() as cur:
            rows = cur.execute(
                f"""
                SELECT * FROM items
                WHERE feed_id = %s AND tg_published = %s
                {UNPUBLISHED_ORDER}
                """,
                (feed_id, int(PublicationState.UNPUBLISHED)),
            ).fetchall()
        return [Item.model_validate(row) for row in rows]

    def mark_published(self, conn: Connection, item: Item) -> bool:
        """
        Move an item from UNPUBLISHED to PUBLISHED.

        Returns:
            True if the transition was applied, False if it was already published
        """
        logger.info("Marking item '%s' (ID: %s) as published", item.title, item.id)
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE items
                SET tg_published = %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s AND tg_published = %s
                """,
                (
                    int(PublicationState.PUBLISHED),
                    item.id,
                    int(PublicationState.UNPUBLISHED),
                ),
            )
            applied = cur.rowcount == 1
        conn.commit()
        if applied:
            item.tg_published = PublicationState.PUBLISHED
        else:
            logger.warning("Item '%s' (ID: %s) was already published", item.title, item.id)
        return applied

    def find_enclosure_by_url(self, conn: Connection, url: str) -> Optional[Enclosure]:
        """Find enclosure by URL."""
        with conn.cursor() as cur:
            row = cur.execute(
                "SELECT * FROM enclosures WHERE url = %s ORDER BY id LIMIT 1", (url,)
            ).fetchone()
        return Enclosure.model_validate(row) if row else None

    def find_or_create_enclosure(
        self, conn: Connection, enclosure: Enclosure
    ) -> Tuple[Enclosure, bool]:
        """
        Resolve an enclosure by URL, creating it if missing.

        Returns:
            Tuple of (enclosure, is_new)
        """
        existing = self.find_enclosure_by_url(conn, enclosure.url)
        if existing:
            return existing, False

        with conn.cursor() as cur:
            row = cur.execute(
                """
                INSERT INTO enclosures (item_id, url, length, type)
                VALUES (%s, %s, %s, %s)
                RETURNING *
                """,
                (enclosure.item_id, enclosure.url, enclosure.length, enclosure.type),
            ).fetchone()
        conn.commit()
        return Enclosure.model_validate(row), True

    def enclosures_for(self, conn: Connection, item_id: int) -> List[Enclosure]:
        """Get enclosures of an item in insertion order."""
        with conn.cursor() as cur:
            rows = cur.execute(
                "SELECT * FROM enclosures WHERE item_id = %s ORDER BY id", (item_id,)
            ).fetchall()
        return [Enclosure.model_validate(row) for row in rows]

    def first_enclosure(self, conn: Connection, item_id: int) -> Optional[Enclosure]:
        """Get the primary (first) enclosure of an item."""
        with conn.cursor() as cur:
            row = cur.execute(
                "SELECT * FROM enclosures WHERE item_id = %s ORDER BY id LIMIT 1",
                (item_id,),
            ).fetchone()
        return Enclosure.model_validate(row) if row else None
