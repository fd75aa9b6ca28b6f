"""Feed synchronization commands."""

import typer

from .common import build_scheduler, cli_errors, console, load_settings, open_db


def check_feeds_command() -> None:
    """Ingest the newest items of every feed."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        totals = build_scheduler(config).check_all(conn)

    console.print(
        f"[green]✅ Checked {totals['feeds']} feeds: {totals['new']} new items, "
        f"{totals['enclosures']} new enclosures[/green]"
    )


def full_feed_command(
    title: str = typer.Argument(..., help="Exact feed title"),
) -> None:
    """Backfill the items of one feed."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        stats = build_scheduler(config).full_sync(conn, title)

    console.print(
        f"[green]✅ '{title}': {stats['new']} new items, "
        f"{stats['existing']} already stored[/green]"
    )
