"""CLI handlers for config commands."""

from __future__ import annotations

import click

from booksummarizer.config import init_config, load_config


@click.group("config")
def config_group():
    """Manage configuration."""
    pass


@config_group.command("init")
def config_init():
    """Create default configuration file."""
    path = init_config()
    click.echo(f"Configuration created at: {path}")


@config_group.command("show")
def config_show():
    """Show current configuration."""
    config = load_config()
    general = config.general
    click.echo(f"Config file: {config.config_path}")
    click.echo(f"  History key: {general.history_key}")
    click.echo(f"  Upload limit: {general.max_upload_mb}MB ({', '.join(general.accepted_types)})")
    click.echo(f"  Preview length: {general.preview_length}")
    click.echo(f"  Collaborator timeout: {general.collaborator_timeout}s")
    if config.storage.backend == "file":
        click.echo(f"  Storage: file ({config.storage.resolved_path})")
    else:
        click.echo(f"  Storage: mongodb ({config.mongodb.uri}/{config.mongodb.database})")
    click.echo(f"  Summarizer: {config.summarizer.provider}/{config.summarizer.model or 'default'}")
    click.echo(f"  Chat: {config.chat.provider}/{config.chat.model or 'default'}")
    click.echo(
        f"  Statistics: range={config.statistics.default_range}, "
        f"demo={'on' if config.statistics.demo else 'off'}"
    )

    click.echo("\n  Providers:")
    for name, prov in config.providers.items():
        has_key = "configured" if prov.api_key else "not set"
        click.echo(f"    {name}: model={prov.default_model}, key={has_key}")
