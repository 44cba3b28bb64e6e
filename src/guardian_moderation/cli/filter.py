"""
Safety filter commands for the Guardian Moderation CLI.

Lets a guardian try text and search queries against the configured word
lists without touching any stored data.
"""

import click

from ..algorithms.safety import SafetyFilter


@click.group()
def filter_commands() -> None:
    """Safety filter commands."""
    pass


@filter_commands.command()
@click.argument("text")
@click.pass_context
def check(ctx: click.Context, text: str) -> None:
    """Show whether TEXT would be blocked and by which keyword."""
    safety_filter = SafetyFilter.from_config(ctx.obj["config"].safety)
    match = safety_filter.classify(text)

    if match is None:
        click.echo("allowed")
    else:
        click.echo(f"blocked (keyword: {match.keyword})")


@filter_commands.command()
@click.argument("query")
@click.pass_context
def validate(ctx: click.Context, query: str) -> None:
    """Validate a search QUERY the way the kid-facing search does."""
    safety_filter = SafetyFilter.from_config(ctx.obj["config"].safety)
    result = safety_filter.validate_query(query)

    if result.valid:
        click.echo("valid")
        return

    click.echo(result.message, err=True)
    ctx.exit(1)
