"""CLI helpers for building an initialized AppContext."""

from __future__ import annotations

import asyncio


def run(coro):
    """Run an async function from sync context."""
    return asyncio.run(coro)


async def get_context():
    """Create an AppContext with the history ledger loaded."""
    from booksummarizer.context import AppContext

    ctx = AppContext()
    await ctx.initialize()
    if ctx.ledger.last_store_error:
        import click

        click.echo(f"Warning: history storage unavailable ({ctx.ledger.last_store_error})", err=True)
    return ctx
