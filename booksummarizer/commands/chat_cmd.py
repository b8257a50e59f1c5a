"""CLI handler for chatting about a summarized document."""

from __future__ import annotations

import click

from booksummarizer.commands._helpers import get_context, run


@click.command("chat")
@click.argument("item_id", required=False, default="")
def chat_command(item_id: str):
    """Ask questions about a summary (defaults to the most recent)."""

    async def _chat():
        ctx = await get_context()
        try:
            items = ctx.ledger.list()
            item = ctx.ledger.get(item_id) if item_id else (items[0] if items else None)
            if not item:
                click.echo("No summary to chat about.", err=True)
                return

            chat = ctx.new_chat()
            chat.bind(item)
            click.echo(chat.messages[0].content)
            click.echo("Type /quit to exit.\n")
            while True:
                question = click.prompt("you", prompt_suffix="> ", default="", show_default=False)
                if question.strip() in ("/quit", "/exit"):
                    break
                reply = await chat.send(question)
                if reply:
                    click.echo(f"assistant> {reply.content}\n")
        finally:
            await ctx.close()

    run(_chat())
