"""CLI handlers for history commands."""

from __future__ import annotations

import click

from booksummarizer.commands._helpers import get_context, run


@click.group("history")
def history_group():
    """Browse and delete past summaries."""
    pass


@history_group.command("list")
@click.option("--limit", "-n", default=20, help="Max items to show")
def history_list(limit: int):
    """List past summaries, newest first."""

    async def _list():
        ctx = await get_context()
        try:
            items = ctx.ledger.list()
            if not items:
                click.echo("No summaries yet.")
                return
            for item in items[:limit]:
                opts = item.options
                click.echo(
                    f"  {item.id}  {item.date:%Y-%m-%d %H:%M}  {item.title} "
                    f"[{opts.length.value}/{opts.style.value}/{opts.focus.value}]"
                )
            if len(items) > limit:
                click.echo(f"  ... and {len(items) - limit} more")
        finally:
            await ctx.close()

    run(_list())


@history_group.command("show")
@click.argument("item_id")
def history_show(item_id: str):
    """Show one summary."""

    async def _show():
        ctx = await get_context()
        try:
            item = ctx.ledger.get(item_id)
            if not item:
                click.echo(f"History item not found: {item_id}", err=True)
                return
            click.echo(f"{item.title}")
            click.echo(f"  Date: {item.date.isoformat()}")
            click.echo(
                f"  Options: length={item.options.length.value}, "
                f"style={item.options.style.value}, focus={item.options.focus.value}"
            )
            click.echo("")
            click.echo(item.body)
        finally:
            await ctx.close()

    run(_show())


@history_group.command("delete")
@click.argument("item_id")
def history_delete(item_id: str):
    """Delete a summary from history."""

    async def _delete():
        ctx = await get_context()
        try:
            removed = await ctx.ledger.remove(item_id)
            if not removed:
                click.echo(f"History item not found: {item_id}")
                return
            click.echo(f"Deleted: {item_id}")
            if ctx.ledger.last_store_error:
                click.echo(f"Warning: deletion not saved ({ctx.ledger.last_store_error})", err=True)
        finally:
            await ctx.close()

    run(_delete())
