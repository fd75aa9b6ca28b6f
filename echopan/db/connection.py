"""Database connection management."""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Sequence

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from ..config import DatabaseConfig

# Timestamps are stored as ISO strings in SQLite and parsed back by the models
sqlite3.register_adapter(datetime, lambda v: v.isoformat())


def postgres_conninfo(config: DatabaseConfig) -> str:
    """Get psycopg connection string."""
    if config.dsn:
        return config.dsn
    return (
        f"postgresql://{config.user}:{config.password or ''}"
        f"@{config.host}:{config.port}/{config.name}"
    )


class Cursor:
    """Cursor returning dict rows. SQL is written with %s placeholders."""

    def __init__(self, cursor: Any, dialect: str) -> None:
        self._cursor = cursor
        self.dialect = dialect

    def execute(self, sql: str, params: Sequence[Any] = ()) -> "Cursor":
        """Execute a single statement."""
        if self.dialect == "sqlite":
            self._cursor.execute(sql.replace("%s", "?"), tuple(params))
        else:
            self._cursor.execute(sql, tuple(params) or None)
        return self

    def fetchone(self) -> Optional[Dict[str, Any]]:
        """Fetch next row as a dict."""
        row = self._cursor.fetchone()
        return dict(row) if row is not None else None

    def fetchall(self) -> List[Dict[str, Any]]:
        """Fetch remaining rows as dicts."""
        return [dict(row) for row in self._cursor.fetchall()]

    @property
    def rowcount(self) -> int:
        """Rows affected by the last statement."""
        return self._cursor.rowcount


class Connection:
    """Backend-neutral connection used by the stores."""

    def __init__(self, raw: Any, dialect: str) -> None:
        self.raw = raw
        self.dialect = dialect

    @contextmanager
    def cursor(self) -> Generator[Cursor, None, None]:
        """Open a cursor, closing it afterwards."""
        raw_cursor = self.raw.cursor()
        try:
            yield Cursor(raw_cursor, self.dialect)
        finally:
            raw_cursor.close()

    def executescript(self, script: str) -> None:
        """Run a multi-statement script without parameters."""
        if self.dialect == "sqlite":
            self.raw.executescript(script)
        else:
            self.raw.execute(script)

    def commit(self) -> None:
        """Commit current transaction."""
        self.raw.commit()

    def rollback(self) -> None:
        """Roll back current transaction."""
        self.raw.rollback()


_connection_pool: Optional[ConnectionPool] = None


def get_connection_pool(config: DatabaseConfig) -> ConnectionPool:
    """Get or create the PostgreSQL connection pool."""
    global _connection_pool
    if _connection_pool is None:
        _connection_pool = ConnectionPool(
            postgres_conninfo(config),
            min_size=1,
            max_size=4,
            kwargs={"row_factory": dict_row},
        )
    return _connection_pool


def close_connection_pool() -> None:
    """Close the PostgreSQL pool if one was opened."""
    global _connection_pool
    if _connection_pool is not None:
        _connection_pool.close()
        _connection_pool = None


@contextmanager
def get_connection(config: DatabaseConfig) -> Generator[Connection, None, None]:
    """Get a database connection for the configured backend."""
    if config.type == "postgres":
        pool = get_connection_pool(config)
        with pool.connection() as conn:
            yield Connection(conn, "postgres")
        return

    db_path = Path(config.file).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield Connection(conn, "sqlite")
    finally:
        conn.close()
