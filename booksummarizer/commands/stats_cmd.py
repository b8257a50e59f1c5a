"""CLI handler for usage statistics."""

from __future__ import annotations

import click

from booksummarizer.commands._helpers import get_context, run
from booksummarizer.models.statistics import Dimension, TimeRange


@click.command("stats")
@click.option(
    "--range", "-r", "time_range", type=click.Choice([v.value for v in TimeRange]),
    default=None, help="Time window (default from config)",
)
@click.option("--demo/--real", default=None, help="Show synthetic demo data instead of history")
def stats_command(time_range: str | None, demo: bool | None):
    """Show summary statistics over history."""

    async def _stats():
        ctx = await get_context()
        try:
            cfg = ctx.config.statistics
            report = ctx.statistics.report(
                time_range or cfg.default_range,
                use_synthetic=cfg.demo if demo is None else demo,
            )
            label = " (demo data)" if report.synthetic else ""
            click.echo(f"Statistics for {report.time_range.value}{label}")
            click.echo(f"  Total summaries: {report.total}")
            for dimension in Dimension:
                counts = report.distribution(dimension)
                parts = ", ".join(f"{value}={count}" for value, count in counts.items())
                click.echo(
                    f"  {dimension.value.title()}: {parts} "
                    f"(most popular: {report.most_popular(dimension)})"
                )
            click.echo(f"\n  Activity per {report.granularity.value}:")
            peak = max(report.timeline.values(), default=0) or 1
            for label_text, count in zip(report.timeline_labels(), report.timeline.values()):
                bar = "#" * round(20 * count / peak)
                click.echo(f"    {label_text:>9} {count:>4} {bar}")
        finally:
            await ctx.close()

    run(_stats())
