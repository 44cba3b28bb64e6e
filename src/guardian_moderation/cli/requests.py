"""
Request moderation commands for the Guardian Moderation CLI.

Operates on the JSON request store under ``storage.data_dir``.
"""

import asyncio
import uuid
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional, TypeVar

import click

from ..core.config import Config
from ..core.exceptions import ModerationError
from ..core.logging import (
    clear_request_context,
    generate_request_id,
    set_request_context,
)
from ..core.persistence import JSONRequestStore
from ..features.moderation import (
    REQUEST_TYPES,
    ModerationEngine,
    ModerationRequest,
    RequestKind,
    RequestStatus,
    StaticCatalogProvider,
    create_moderation_engine,
)

T = TypeVar("T")

# Display field set by ``submit --name`` for each kind
NAME_FIELDS = {
    RequestKind.ALBUM: "album_name",
    RequestKind.SONG: "song_name",
    RequestKind.VIDEO: "title",
    RequestKind.CHANNEL: "channel_title",
}


def run_with_engine(
    config: Config,
    action: Callable[[ModerationEngine], Awaitable[T]],
    catalog_path: Optional[str] = None,
    kid_id: Optional[str] = None,
) -> T:
    """Open the JSON store, run ``action`` against an engine and close it."""

    async def runner() -> T:
        set_request_context(request_id=generate_request_id(), kid_id=kid_id)
        store = JSONRequestStore(config.storage.data_dir)
        await store.initialize()
        try:
            catalog = (
                StaticCatalogProvider.from_yaml(Path(catalog_path))
                if catalog_path
                else None
            )
            engine = create_moderation_engine(config, store, catalog=catalog)
            return await action(engine)
        finally:
            await store.shutdown()
            clear_request_context()

    try:
        return asyncio.run(runner())
    except ModerationError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()


def format_request(request: ModerationRequest) -> str:
    line = (
        f"{request.id}  {request.kind.value:<7}  {request.status.value:<18}  "
        f"{request.display_name}  (kid: {request.kid_id})"
    )
    if request.denial_reason:
        line += f"  reason: {request.denial_reason}"
    return line


@click.group()
def request_commands() -> None:
    """Content request moderation commands."""
    pass


@request_commands.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in RequestStatus]),
    default=RequestStatus.PENDING.value,
    help="Only show requests in this status",
)
@click.option("--kid", "kid_id", help="Only show requests from this kid")
@click.pass_context
def list_requests(ctx: click.Context, status: str, kid_id: Optional[str]) -> None:
    """List requests, newest first."""
    found = run_with_engine(
        ctx.obj["config"],
        lambda engine: engine.list_by_status(RequestStatus(status), kid_id),
        kid_id=kid_id,
    )

    if not found:
        click.echo(f"No {status} requests")
        return
    for request in found:
        click.echo(format_request(request))


@request_commands.command()
@click.argument("content_ref")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in RequestKind]),
    required=True,
    help="Kind of content requested",
)
@click.option("--kid", "kid_id", required=True, help="Kid making the request")
@click.option("--name", help="Display name of the content")
@click.option("--note", help="Note from the kid")
@click.pass_context
def submit(
    ctx: click.Context,
    content_ref: str,
    kind: str,
    kid_id: str,
    name: Optional[str],
    note: Optional[str],
) -> None:
    """Submit a new request for CONTENT_REF."""
    request_kind = RequestKind(kind)
    fields: Dict[str, str] = {}
    if name:
        fields[NAME_FIELDS[request_kind]] = name

    request = REQUEST_TYPES[request_kind](
        id=str(uuid.uuid4()),
        kid_id=kid_id,
        content_ref=content_ref,
        kid_note=note,
        **fields,
    )
    stored = run_with_engine(
        ctx.obj["config"], lambda engine: engine.submit_request(request), kid_id=kid_id
    )
    click.echo(format_request(stored))


@request_commands.command()
@click.argument("request_id")
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML track listing used to approve album tracks",
)
@click.pass_context
def approve(ctx: click.Context, request_id: str, catalog_path: Optional[str]) -> None:
    """Approve a pending request."""
    request = run_with_engine(
        ctx.obj["config"],
        lambda engine: engine.approve(request_id, undoable=False),
        catalog_path,
    )
    click.echo(format_request(request))


@request_commands.command()
@click.argument("request_id")
@click.option("--reason", default="", help="Reason shown to the kid")
@click.pass_context
def deny(ctx: click.Context, request_id: str, reason: str) -> None:
    """Deny a pending request."""
    request = run_with_engine(
        ctx.obj["config"],
        lambda engine: engine.deny(request_id, reason, undoable=False),
    )
    click.echo(format_request(request))


@request_commands.command()
@click.argument("request_id")
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML track listing used to approve album tracks",
)
@click.pass_context
def override(ctx: click.Context, request_id: str, catalog_path: Optional[str]) -> None:
    """Approve a previously denied request."""
    request = run_with_engine(
        ctx.obj["config"],
        lambda engine: engine.approve_override(request_id),
        catalog_path,
    )
    click.echo(format_request(request))


@request_commands.command("undo-approval")
@click.argument("request_id")
@click.pass_context
def undo_approval(ctx: click.Context, request_id: str) -> None:
    """Send an approved request back to pending."""
    request = run_with_engine(
        ctx.obj["config"], lambda engine: engine.undo_approval(request_id)
    )
    click.echo(format_request(request))


@request_commands.command("undo-denial")
@click.argument("request_id")
@click.pass_context
def undo_denial(ctx: click.Context, request_id: str) -> None:
    """Send a denied request back to pending."""
    request = run_with_engine(
        ctx.obj["config"], lambda engine: engine.undo_denial(request_id)
    )
    click.echo(format_request(request))


@request_commands.command("complete-review")
@click.argument("request_id")
@click.option("--note", help="Reviewer note kept with the album")
@click.pass_context
def complete_review(ctx: click.Context, request_id: str, note: Optional[str]) -> None:
    """Finish an album review with only some tracks approved."""
    request = run_with_engine(
        ctx.obj["config"], lambda engine: engine.complete_review(request_id, note)
    )
    click.echo(format_request(request))


@request_commands.command()
@click.argument("request_id")
@click.pass_context
def children(ctx: click.Context, request_id: str) -> None:
    """List track approvals beneath an album request."""
    found = run_with_engine(
        ctx.obj["config"], lambda engine: engine.list_children(request_id)
    )

    if not found:
        click.echo("No tracks")
        return
    for child in found:
        mark = "approved" if child.approved else "revoked"
        click.echo(f"{child.id}  {mark}")


@request_commands.command("approve-track")
@click.argument("request_id")
@click.argument("track_id")
@click.pass_context
def approve_track(ctx: click.Context, request_id: str, track_id: str) -> None:
    """Approve one track of an album request."""
    run_with_engine(
        ctx.obj["config"], lambda engine: engine.approve_child(request_id, track_id)
    )
    click.echo(f"{track_id}  approved")


@request_commands.command("revoke-track")
@click.argument("request_id")
@click.argument("track_id")
@click.pass_context
def revoke_track(ctx: click.Context, request_id: str, track_id: str) -> None:
    """Revoke one track of an album request."""
    run_with_engine(
        ctx.obj["config"], lambda engine: engine.revoke_child(request_id, track_id)
    )
    click.echo(f"{track_id}  revoked")
