"""Publishing commands."""

from functools import partial

import typer
from rich.table import Table

from ..db import close_connection_pool
from ..publishing import ItemOutcome, PublishReport
from ..service import run_service
from .common import (
    build_pipeline,
    build_scheduler,
    cli_errors,
    console,
    load_settings,
    open_db,
)


def _print_report(report: PublishReport) -> None:
    if not report.total:
        console.print("[yellow]Nothing to publish.[/yellow]")
        return

    table = Table(title="Publish Results")
    table.add_column("Outcome", style="cyan")
    table.add_column("Items", style="green")
    for outcome in ItemOutcome:
        table.add_row(outcome.value, str(report[outcome]))
    console.print(table)


def publish_items_command() -> None:
    """Publish all unpublished items of ready feeds."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        report = build_pipeline(config).publish_all(conn)
    _print_report(report)


def publish_one_command() -> None:
    """Publish the oldest unpublished item of each ready feed."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        report = build_pipeline(config).publish_one_per_feed(conn)
    _print_report(report)


def pub_next_command(
    feed_id: int = typer.Argument(..., help="Feed ID"),
) -> None:
    """Publish the next item of one feed."""
    config = load_settings()
    with cli_errors(), open_db(config) as conn:
        report = build_pipeline(config).publish_next(conn, feed_id)
    _print_report(report)


def service_command() -> None:
    """Check feeds and publish new items every few minutes."""
    config = load_settings()
    with cli_errors():
        scheduler = build_scheduler(config)
        pipeline = build_pipeline(config)
        try:
            run_service(
                partial(open_db, config),
                scheduler,
                pipeline,
                config.config.service,
            )
        except KeyboardInterrupt:
            console.print("\n[yellow]Service interrupted by user[/yellow]")
            raise typer.Exit(1)
        finally:
            close_connection_pool()
