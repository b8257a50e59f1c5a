"""CLI handler for summarizing a document."""

from __future__ import annotations

from pathlib import Path

import click

from booksummarizer.commands._helpers import get_context, run
from booksummarizer.models.history import (
    SummaryFocus,
    SummaryLength,
    SummaryOptions,
    SummaryStyle,
)
from booksummarizer.models.session import Document, SessionPhase


@click.command("summarize")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--length", "-l", type=click.Choice([v.value for v in SummaryLength]), default="medium",
    help="Summary length",
)
@click.option(
    "--style", "-s", type=click.Choice([v.value for v in SummaryStyle]), default="paragraph",
    help="Paragraphs or bullet points",
)
@click.option(
    "--focus", "-f", type=click.Choice([v.value for v in SummaryFocus]), default="general",
    help="What the summary should emphasize",
)
def summarize_command(path: Path, length: str, style: str, focus: str):
    """Summarize a document and record it in history."""
    options = SummaryOptions(
        length=SummaryLength(length),
        style=SummaryStyle(style),
        focus=SummaryFocus(focus),
    )

    async def _summarize():
        ctx = await get_context()
        try:
            session = ctx.session
            state = await session.upload(Document.from_path(path))
            if state.phase != SessionPhase.TEXT_EXTRACTED:
                click.echo(f"Error: {state.error}", err=True)
                raise SystemExit(1)

            click.echo(f"Summarizing {state.title}...", err=True)
            state = await session.generate(options)
            if state.phase != SessionPhase.SUMMARIZED:
                click.echo(f"Error: {state.error}", err=True)
                raise SystemExit(1)

            click.echo(state.summary)
            click.echo(f"\nSaved to history: {state.item_id}", err=True)
            if state.notice:
                click.echo(f"Warning: {state.notice}", err=True)
        finally:
            await ctx.close()

    run(_summarize())
