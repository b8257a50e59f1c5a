"""Click CLI definitions - main entry point."""

from __future__ import annotations

import logging
import sys

import click

from booksummarizer.commands.chat_cmd import chat_command
from booksummarizer.commands.config_cmd import config_group
from booksummarizer.commands.history_cmd import history_group
from booksummarizer.commands.stats_cmd import stats_command
from booksummarizer.commands.summarize_cmd import summarize_command


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug: bool) -> None:
    """booksummarizer - AI document summaries with history, stats, and chat."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(summarize_command, "summarize")
cli.add_command(history_group, "history")
cli.add_command(stats_command, "stats")
cli.add_command(chat_command, "chat")
cli.add_command(config_group, "config")


if __name__ == "__main__":
    cli()
