"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .feeds import add_feed_command, feeds_app, ready_feeds_command, reinit_feeds_command
from .init import init_db_command
from .publish import (
    pub_next_command,
    publish_items_command,
    publish_one_command,
    service_command,
)
from .sync import check_feeds_command, full_feed_command

app = typer.Typer(
    name="echopan",
    help="echopan - republish podcast feeds to Telegram channels",
    no_args_is_help=True,
)

# Register commands
app.command("init-db")(init_db_command)
app.command("add-feed")(add_feed_command)
app.command("reinit-feeds")(reinit_feeds_command)
app.command("check-feeds")(check_feeds_command)
app.command("full-feed")(full_feed_command)
app.command("ready-feeds")(ready_feeds_command)
app.command("publish-items")(publish_items_command)
app.command("publish-one")(publish_one_command)
app.command("pub-next")(pub_next_command)
app.command("service")(service_command)
app.add_typer(feeds_app, name="feeds", help="Inspect and configure feeds")


if __name__ == "__main__":
    app()
