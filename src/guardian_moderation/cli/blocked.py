"""
Blocked search commands for the Guardian Moderation CLI.

Lets a guardian review the searches the safety filter refused.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, TypeVar

import click

from ..core.config import Config
from ..core.exceptions import ModerationError
from ..core.persistence import JSONBlockedSearchLog

T = TypeVar("T")


def run_with_log(config: Config, action: Callable[[JSONBlockedSearchLog], Awaitable[T]]) -> T:
    """Open the blocked-search log, run ``action`` and close it."""

    async def runner() -> T:
        blocked_log = JSONBlockedSearchLog(config.storage.data_dir)
        await blocked_log.initialize()
        try:
            return await action(blocked_log)
        finally:
            await blocked_log.shutdown()

    try:
        return asyncio.run(runner())
    except ModerationError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()


@click.group()
def blocked_commands() -> None:
    """Blocked search commands."""
    pass


@blocked_commands.command("list")
@click.option("--kid", "kid_id", help="Only show searches from this kid")
@click.option("--limit", default=100, show_default=True, help="Maximum entries to show")
@click.pass_context
def list_blocked(ctx: click.Context, kid_id: Optional[str], limit: int) -> None:
    """List blocked searches, newest first."""

    async def action(blocked_log: JSONBlockedSearchLog):
        return await blocked_log.list(kid_id, limit), await blocked_log.unread_count(kid_id)

    entries, unread = run_with_log(ctx.obj["config"], action)

    if not entries:
        click.echo("No blocked searches")
        return

    click.echo(f"Blocked searches ({unread} unread)")
    click.echo("=" * 40)
    for entry in entries:
        when = time.strftime("%Y-%m-%d %H:%M", time.localtime(entry.searched_at))
        marker = " " if entry.read else "*"
        click.echo(
            f"{marker} {when}  {entry.kid_id}  \"{entry.query}\"  "
            f"(keyword: {entry.matched_keyword})"
        )


@blocked_commands.command("mark-read")
@click.option("--kid", "kid_id", help="Only mark searches from this kid")
@click.pass_context
def mark_read(ctx: click.Context, kid_id: Optional[str]) -> None:
    """Mark blocked searches as read."""
    count = run_with_log(
        ctx.obj["config"], lambda blocked_log: blocked_log.mark_all_read(kid_id)
    )
    click.echo(f"Marked {count} searches as read")


@blocked_commands.command()
@click.option("--kid", "kid_id", help="Only clear searches from this kid")
@click.confirmation_option(prompt="Delete blocked search history?")
@click.pass_context
def clear(ctx: click.Context, kid_id: Optional[str]) -> None:
    """Delete blocked search history."""
    count = run_with_log(ctx.obj["config"], lambda blocked_log: blocked_log.clear(kid_id))
    click.echo(f"Deleted {count} blocked searches")
