"""Init command implementation."""

import typer
from rich.panel import Panel

from ..config import save_config
from ..db import init_database, validate_connection
from .common import cli_errors, console, load_settings


def init_db_command(
    write_config: bool = typer.Option(
        False,
        "--write-config/--no-write-config",
        help="Write the effective configuration to the config file",
    ),
) -> None:
    """Create the database schema."""
    console.print(Panel.fit("🎙️ echopan - Database initialization", style="bold blue"))
    config = load_settings()

    with cli_errors():
        db_config = config.get_db_config()

        if write_config:
            save_config(config.config, config.config_path)
            console.print(f"✅ Created config: {config.config_path}")

        console.print("\n[bold]Testing database connection...[/bold]")
        if not validate_connection(db_config):
            console.print(
                "[red]❌ Database connection failed![/red]\n"
                "Check ECHOPAN_DB_TYPE, ECHOPAN_DB_FILE and ECHOPAN_DB_DSN_POSTGRES."
            )
            raise typer.Exit(1)
        console.print("✅ Database connection successful")

        init_database(db_config)
        console.print(f"✅ Database schema initialized ({db_config.type})")
