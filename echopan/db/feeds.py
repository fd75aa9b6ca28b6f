"""Feed and image storage."""

from typing import Any, Dict, List, Optional

from ..models import Feed, Image
from .connection import Connection


def _feed(row: Optional[Dict[str, Any]]) -> Optional[Feed]:
    return Feed.model_validate(row) if row else None


def _image(row: Optional[Dict[str, Any]]) -> Optional[Image]:
    return Image.model_validate(row) if row else None


class FeedStore:
    """Typed access to feeds and their images."""

    def get_all(self, conn: Connection) -> List[Feed]:
        """Get all feeds ordered by id."""
        with conn.cursor() as cur:
            rows = cur.execute("SELECT * FROM feeds ORDER BY id").fetchall()
        return [Feed.model_validate(row) for row in rows]

    def get_ready(self, conn: Connection) -> List[Feed]:
        """Get feeds flagged for automated publishing."""
        with conn.cursor() as cur:
            rows = cur.execute(
                "SELECT * FROM feeds WHERE publish_ready = %s ORDER BY id",
                (True,),
            ).fetchall()
        return [Feed.model_validate(row) for row in rows]

    def get_by_id(self, conn: Connection, feed_id: int) -> Optional[Feed]:
        """Get feed by ID."""
        with conn.cursor() as cur:
            row = cur.execute("SELECT * FROM feeds WHERE id = %s", (feed_id,)).fetchone()
        return _feed(row)

    def find_by_url(self, conn: Connection, feed_url: str) -> Optional[Feed]:
        """Find feed by exact source URL."""
        with conn.cursor() as cur:
            row = cur.execute(
                "SELECT * FROM feeds WHERE feed_url = %s ORDER BY id LIMIT 1",
                (feed_url,),
            ).fetchone()
        return _feed(row)

    def find_by_title(self, conn: Connection, title: str) -> Optional[Feed]:
        """Find feed by exact title."""
        with conn.cursor() as cur:
            row = cur.execute(
                "SELECT * FROM feeds WHERE title = %s ORDER BY id LIMIT 1",
                (title,),
            ).fetchone()
        return _feed(row)

    def create(self, conn: Connection, feed: Feed) -> Feed:
        """
        Insert a new feed.

        Returns:
            The stored feed with its assigned id
        """
        with conn.cursor() as cur:
            row = cur.execute(
                """
                INSERT INTO feeds (
                    title, description, link, feed_url,
                    publish_ready, tg_channel, extra_link_enabled, extra_link
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING *
                """,
                (
                    feed.title,
                    feed.description,
                    feed.link,
                    feed.feed_url,
                    feed.publish_ready,
                    feed.tg_channel,
                    feed.extra_link_enabled,
                    feed.extra_link,
                ),
            ).fetchone()
        conn.commit()
        return Feed.model_validate(row)

    def update_settings(
        self,
        conn: Connection,
        feed_id: int,
        publish_ready: Optional[bool] = None,
        tg_channel: Optional[int] = None,
        extra_link_enabled: Optional[bool] = None,
        extra_link: Optional[str] = None,
    ) -> Optional[Feed]:
        """Update operator-controlled publishing settings."""
        changes = {
            "publish_ready": publish_ready,
            "tg_channel": tg_channel,
            "extra_link_enabled": extra_link_enabled,
            "extra_link": extra_link,
        }
        changes = {column: value for column, value in changes.items() if value is not None}
        if changes:
            assignments = ", ".join(f"{column} = %s" for column in changes)
            with conn.cursor() as cur:
                cur.execute(
                    f"UPDATE feeds SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = %s",
                    (*changes.values(), feed_id),
                )
            conn.commit()
        return self.get_by_id(conn, feed_id)

    def get_image(self, conn: Connection, feed_id: int) -> Optional[Image]:
        """Get the image owned by a feed."""
        with conn.cursor() as cur:
            row = cur.execute(
                "SELECT * FROM images WHERE feed_id = %s", (feed_id,)
            ).fetchone()
        return _image(row)

    def find_or_create_image(self, conn: Connection, image: Image) -> Image:
        """Return the feed's image, creating it from `image` if none exists."""
        existing = self.get_image(conn, image.feed_id)
        if existing:
            return existing
        return self.create_image(conn, image)

    def create_image(self, conn: Connection, image: Image) -> Image:
        """Insert an image for a feed."""
        with conn.cursor() as cur:
            row = cur.execute(
                """
                INSERT INTO images (feed_id, url, title)
                VALUES (%s, %s, %s)
                RETURNING *
                """,
                (image.feed_id, image.url, image.title),
            ).fetchone()
        conn.commit()
        return Image.model_validate(row)

    def update_image(self, conn: Connection, image: Image) -> None:
        """Update an existing image in place."""
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE images
                SET url = %s, title = %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                """,
                (image.url, image.title, image.id),
            )
        conn.commit()

    def delete_image(self, conn: Connection, image_id: int) -> None:
        """Delete an image."""
        with conn.cursor() as cur:
            cur.execute("DELETE FROM images WHERE id = %s", (image_id,))
        conn.commit()
