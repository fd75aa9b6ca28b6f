"""Feed management commands."""

from typing import Optional

import typer
from rich.table import Table

from ..db import FeedStore
from ..errors import FeedNotFoundError
from .common import build_registrar, cli_errors, console, load_settings, open_db

feeds_app = typer.Typer(help="Inspect and configure feeds")


def add_feed_command(
    url: str = typer.Argument(..., help="RSS feed URL"),
) -> None:
    """Add a new RSS feed."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        feed = build_registrar(config).register(conn, url)
    console.print(f"[green]✅ Feed '{feed.title}' registered with ID {feed.id}[/green]")


def reinit_feeds_command() -> None:
    """Re-fetch all feeds and refresh their images."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        build_registrar(config).resync(conn)
    console.print("[green]✅ Feeds reinitialized[/green]")


def _feeds_table(title: str, feeds) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="magenta")
    table.add_column("Channel", style="green")
    table.add_column("Ready", style="yellow")
    table.add_column("URL", style="blue")

    for feed in feeds:
        table.add_row(
            str(feed.id),
            feed.title,
            str(feed.tg_channel),
            "✓" if feed.publish_ready else "✗",
            feed.feed_url,
        )
    return table


def ready_feeds_command() -> None:
    """List feeds flagged for publishing."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        feeds = FeedStore().get_ready(conn)

    if not feeds:
        console.print("[yellow]No feeds are ready for publishing.[/yellow]")
        return
    console.print(_feeds_table("Ready Feeds", feeds))


@feeds_app.command("list")
def feeds_list() -> None:
    """List all registered feeds."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        feeds = FeedStore().get_all(conn)

    if not feeds:
        console.print("[yellow]No feeds registered.[/yellow]")
        return
    console.print(_feeds_table("Registered Feeds", feeds))


@feeds_app.command("configure")
def feeds_configure(
    feed_id: int = typer.Argument(..., help="Feed ID"),
    ready: Optional[bool] = typer.Option(
        None,
        "--ready/--not-ready",
        help="Enable or disable automated publishing",
    ),
    channel: Optional[int] = typer.Option(None, "--channel", help="Telegram channel id"),
    extra_link: Optional[str] = typer.Option(
        None,
        "--extra-link",
        help="Text appended to every caption (enables it)",
    ),
    no_extra_link: bool = typer.Option(
        False,
        "--no-extra-link",
        help="Stop appending the extra link",
    ),
) -> None:
    """Change publishing settings of a feed."""
    extra_link_enabled: Optional[bool] = None
    if no_extra_link:
        extra_link_enabled = False
    elif extra_link is not None:
        extra_link_enabled = True

    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        store = FeedStore()
        if store.get_by_id(conn, feed_id) is None:
            raise FeedNotFoundError(f"feed with ID {feed_id} not found")
        feed = store.update_settings(
            conn,
            feed_id,
            publish_ready=ready,
            tg_channel=channel,
            extra_link_enabled=extra_link_enabled,
            extra_link=extra_link,
        )

    console.print(
        f"[green]✅ Feed {feed.id} '{feed.title}': ready={feed.publish_ready}, "
        f"channel={feed.tg_channel}, extra link="
        f"{feed.extra_link if feed.extra_link_enabled else 'off'}[/green]"
    )
