"""Shared wiring for CLI commands."""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import typer
from rich.console import Console

from ..config import Config
from ..db import Connection, create_schema, get_connection
from ..errors import EchopanError
from ..ingestion import FeedparserSource
from ..logging_config import setup_logging
from ..publishing import EnclosureDownloader, PublishPipeline
from ..sync import FeedRegistrar, SyncScheduler

console = Console()


def load_settings() -> Config:
    """Load configuration and set up logging."""
    config = Config()
    log_dir = config.config.logging.log_dir
    setup_logging(
        level=config.config.logging.level,
        log_dir=Path(log_dir).expanduser() if log_dir else None,
    )
    return config


@contextmanager
def open_db(config: Config) -> Generator[Connection, None, None]:
    """Open a connection to the configured store, creating missing tables."""
    with get_connection(config.get_db_config()) as conn:
        create_schema(conn)
        yield conn


@contextmanager
def cli_errors() -> Generator[None, None, None]:
    """Turn echopan errors into a console message and exit status 1."""
    try:
        yield
    except EchopanError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)


def build_source(config: Config) -> FeedparserSource:
    """Create the feed source from sync settings."""
    sync = config.config.sync
    return FeedparserSource(timeout=sync.timeout, user_agent=sync.user_agent)


def build_registrar(config: Config) -> FeedRegistrar:
    """Create the feed registrar."""
    return FeedRegistrar(build_source(config))


def build_scheduler(config: Config) -> SyncScheduler:
    """Create the sync scheduler."""
    return SyncScheduler(build_source(config), config.config.sync)


def build_pipeline(config: Config) -> PublishPipeline:
    """Create the publish pipeline. The notifier is built on first delivery."""
    publish = config.config.publish
    downloader = EnclosureDownloader(config.download_dir, timeout=publish.download_timeout)
    return PublishPipeline(
        publish,
        downloader,
        telegram=config.get_telegram_config(),
    )
