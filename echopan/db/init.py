"""Database initialization and schema management."""

import logging

from ..config import DatabaseConfig
from .connection import Connection, get_connection

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
-- Feeds table
CREATE TABLE IF NOT EXISTS feeds (
    {id_column},
    title TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    link TEXT NOT NULL DEFAULT '',
    feed_url TEXT NOT NULL UNIQUE,
    publish_ready BOOLEAN NOT NULL DEFAULT FALSE,
    tg_channel BIGINT NOT NULL DEFAULT 0,
    extra_link_enabled BOOLEAN NOT NULL DEFAULT FALSE,
    extra_link TEXT NOT NULL DEFAULT '',
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Feed images (one per feed)
CREATE TABLE IF NOT EXISTS images (
    {id_column},
    feed_id INTEGER NOT NULL UNIQUE REFERENCES feeds(id),
    url TEXT NOT NULL DEFAULT '',
    title TEXT NOT NULL DEFAULT '',
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Items table
CREATE TABLE IF NOT EXISTS items (
    {id_column},
    feed_id INTEGER NOT NULL REFERENCES feeds(id),
    title TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT '',
    link TEXT NOT NULL DEFAULT '',
    updated TEXT NOT NULL DEFAULT '',
    updated_parsed TIMESTAMP,
    published TEXT NOT NULL DEFAULT '',
    published_parsed TIMESTAMP,
    tg_published INTEGER NOT NULL DEFAULT 0 CHECK (tg_published IN (0, 1)),
    itunes_author TEXT NOT NULL DEFAULT '',
    itunes_block TEXT NOT NULL DEFAULT '',
    itunes_duration TEXT NOT NULL DEFAULT '',
    itunes_explicit TEXT NOT NULL DEFAULT '',
    itunes_keywords TEXT NOT NULL DEFAULT '',
    itunes_subtitle TEXT NOT NULL DEFAULT '',
    itunes_summary TEXT NOT NULL DEFAULT '',
    itunes_image TEXT NOT NULL DEFAULT '',
    itunes_is_closed_captioned TEXT NOT NULL DEFAULT '',
    itunes_episode TEXT NOT NULL DEFAULT '',
    itunes_season TEXT NOT NULL DEFAULT '',
    itunes_order TEXT NOT NULL DEFAULT '',
    itunes_episode_type TEXT NOT NULL DEFAULT '',
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Enclosures table
CREATE TABLE IF NOT EXISTS enclosures (
    {id_column},
    item_id INTEGER NOT NULL REFERENCES items(id),
    url TEXT NOT NULL,
    length BIGINT NOT NULL DEFAULT 0 CHECK (length >= 0),
    type TEXT NOT NULL DEFAULT '',
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Create indexes
CREATE INDEX IF NOT EXISTS idx_feeds_title ON feeds(title);
CREATE INDEX IF NOT EXISTS idx_items_title ON items(title);
CREATE INDEX IF NOT EXISTS idx_items_feed_id ON items(feed_id);
CREATE INDEX IF NOT EXISTS idx_items_published_parsed ON items(published_parsed);
CREATE INDEX IF NOT EXISTS idx_enclosures_item_id ON enclosures(item_id);
CREATE INDEX IF NOT EXISTS idx_enclosures_url ON enclosures(url);
"""

ID_COLUMNS = {
    "postgres": "id SERIAL PRIMARY KEY",
    "sqlite": "id INTEGER PRIMARY KEY AUTOINCREMENT",
}


def schema_for(dialect: str) -> str:
    """Render the schema for a backend."""
    return SCHEMA_SQL.format(id_column=ID_COLUMNS[dialect])


def create_schema(conn: Connection) -> None:
    """Create tables and indexes on an open connection."""
    conn.executescript(schema_for(conn.dialect))
    conn.commit()


def validate_connection(config: DatabaseConfig) -> bool:
    """Validate database connection."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                result = cur.execute("SELECT 1 AS ok").fetchone()
                return result is not None and result["ok"] == 1
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False


def init_database(config: DatabaseConfig) -> None:
    """Initialize database schema."""
    with get_connection(config) as conn:
        create_schema(conn)
    logger.info("Database schema initialized successfully")
