"""
Tests for the request lifecycle state machine.
"""

from unittest.mock import AsyncMock, patch

import pytest
from conftest import START_TIME, make_album, make_song

from guardian_moderation.core.exceptions import (
    CatalogError,
    ConcurrentModificationError,
    InvalidTransitionError,
    RequestNotFoundError,
    ValidationError,
)
from guardian_moderation.features.moderation import (
    RequestKind,
    RequestLifecycle,
    RequestStatus,
)


@pytest.fixture
def lifecycle(store, catalog, clock) -> RequestLifecycle:
    return RequestLifecycle(store, catalog=catalog, clock=clock)


async def child_states(store, parent_id):
    return {c.id: c.approved for c in await store.list_children(parent_id)}


class TestApproveDeny:
    """Test the pending -> approved/denied transitions."""

    @pytest.mark.asyncio
    async def test_approve_pending(self, store, lifecycle, clock) -> None:
        await store.create(make_song("s1"))
        clock.advance(10)

        request = await lifecycle.approve("s1")

        assert request.status == RequestStatus.APPROVED
        assert request.reviewed_at == START_TIME + 10
        assert (await store.get("s1")).status == RequestStatus.APPROVED

    @pytest.mark.asyncio
    async def test_approve_twice_is_invalid(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))
        await lifecycle.approve("s1")

        with pytest.raises(InvalidTransitionError) as exc_info:
            await lifecycle.approve("s1")

        assert exc_info.value.operation == "approve"
        assert exc_info.value.current_status == RequestStatus.APPROVED
        assert (await store.get("s1")).status == RequestStatus.APPROVED

    @pytest.mark.asyncio
    async def test_deny_with_reason(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))

        request = await lifecycle.deny("s1", "Not for school nights")

        assert request.status == RequestStatus.DENIED
        assert request.denial_reason == "Not for school nights"
        assert request.reviewed_at is not None

    @pytest.mark.asyncio
    async def test_deny_without_reason(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))
        request = await lifecycle.deny("s1")
        assert request.denial_reason == ""

    @pytest.mark.asyncio
    async def test_deny_approved_is_invalid(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))
        await lifecycle.approve("s1")

        with pytest.raises(InvalidTransitionError):
            await lifecycle.deny("s1", "changed my mind")

    @pytest.mark.asyncio
    async def test_unknown_request(self, lifecycle) -> None:
        with pytest.raises(RequestNotFoundError):
            await lifecycle.approve("missing")

    @pytest.mark.asyncio
    async def test_kind_mismatch(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))

        with pytest.raises(ValidationError):
            await lifecycle.approve("s1", kind=RequestKind.ALBUM)

        assert (await store.get("s1")).status == RequestStatus.PENDING


class TestOverrideAndUndo:
    """Test overrides and the single-request undo transitions."""

    @pytest.mark.asyncio
    async def test_override_denied(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))
        await lifecycle.deny("s1", "too loud")

        request = await lifecycle.approve_override("s1")

        assert request.status == RequestStatus.APPROVED
        assert request.denial_reason is None

    @pytest.mark.asyncio
    async def test_override_is_idempotent(self, store, lifecycle, clock) -> None:
        await store.create(make_song("s1"))
        await lifecycle.deny("s1")
        first = await lifecycle.approve_override("s1")
        clock.advance(5)

        second = await lifecycle.approve_override("s1")

        assert second.status == RequestStatus.APPROVED
        assert second.reviewed_at == first.reviewed_at

    @pytest.mark.asyncio
    async def test_override_pending_is_invalid(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))
        with pytest.raises(InvalidTransitionError):
            await lifecycle.approve_override("s1")

    @pytest.mark.asyncio
    async def test_undo_approval(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))
        await lifecycle.approve("s1")

        request = await lifecycle.undo_approval("s1")

        assert request.status == RequestStatus.PENDING
        assert request.reviewed_at is None

    @pytest.mark.asyncio
    async def test_undo_denial(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))
        await lifecycle.deny("s1", "no")

        request = await lifecycle.undo_denial("s1")

        assert request.status == RequestStatus.PENDING
        assert request.reviewed_at is None
        assert request.denial_reason is None

    @pytest.mark.asyncio
    async def test_undo_requires_matching_status(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))

        with pytest.raises(InvalidTransitionError):
            await lifecycle.undo_approval("s1")
        with pytest.raises(InvalidTransitionError):
            await lifecycle.undo_denial("s1")


class TestAlbumApproval:
    """Test track materialization on album approval."""

    @pytest.mark.asyncio
    async def test_approve_album_approves_tracks(self, store, lifecycle) -> None:
        await store.create(make_album())

        request = await lifecycle.approve("req-album")

        assert request.materialized_children == ["track-1", "track-2", "track-3"]
        assert await child_states(store, "req-album") == {
            "track-1": True,
            "track-2": True,
            "track-3": True,
        }

    @pytest.mark.asyncio
    async def test_catalog_failure_still_approves(self, store, clock) -> None:
        catalog = AsyncMock()
        catalog.list_tracks.side_effect = CatalogError("album-bluey", "timeout")
        lifecycle = RequestLifecycle(store, catalog=catalog, clock=clock)
        await store.create(make_album())

        request = await lifecycle.approve("req-album")

        assert request.status == RequestStatus.APPROVED
        assert request.materialized_children == []
        assert await store.list_children("req-album") == []

    @pytest.mark.asyncio
    async def test_unexpected_catalog_error_still_approves(self, store, clock) -> None:
        catalog = AsyncMock()
        catalog.list_tracks.side_effect = RuntimeError("boom")
        lifecycle = RequestLifecycle(store, catalog=catalog, clock=clock)
        await store.create(make_album())

        request = await lifecycle.approve("req-album")

        assert request.status == RequestStatus.APPROVED

    @pytest.mark.asyncio
    async def test_materialization_disabled(self, store, catalog, clock) -> None:
        lifecycle = RequestLifecycle(
            store, catalog=catalog, clock=clock, materialize_children=False
        )
        await store.create(make_album())

        await lifecycle.approve("req-album")

        assert await store.list_children("req-album") == []

    @pytest.mark.asyncio
    async def test_undo_revokes_only_materialized(self, store, lifecycle) -> None:
        await store.create(make_album())
        await store.upsert_child_approval("req-album", "track-1", True)

        request = await lifecycle.approve("req-album")
        assert request.materialized_children == ["track-2", "track-3"]

        await lifecycle.undo_approval("req-album")

        assert await child_states(store, "req-album") == {
            "track-1": True,
            "track-2": False,
            "track-3": False,
        }
        assert (await store.get("req-album")).materialized_children == []

    @pytest.mark.asyncio
    async def test_deny_album_revokes_tracks(self, store, lifecycle) -> None:
        await store.create(make_album())
        await store.upsert_child_approval("req-album", "track-1", True)

        await lifecycle.deny("req-album", "not yet")

        assert await child_states(store, "req-album") == {"track-1": False}

    @pytest.mark.asyncio
    async def test_override_album_materializes(self, store, lifecycle) -> None:
        await store.create(make_album())
        await lifecycle.deny("req-album")

        request = await lifecycle.approve_override("req-album")

        assert len(request.materialized_children) == 3
        assert all((await child_states(store, "req-album")).values())


class TestConcurrency:
    """Test the compare-and-set on transitions."""

    @pytest.mark.asyncio
    async def test_stale_read_is_rejected(self, store, lifecycle) -> None:
        await store.create(make_song("s1"))
        stale = await store.get("s1")
        await lifecycle.deny("s1", "first guardian")

        with patch.object(store, "get", AsyncMock(return_value=stale)):
            with pytest.raises(ConcurrentModificationError):
                await lifecycle.approve("s1")

        request = await store.get("s1")
        assert request.status == RequestStatus.DENIED
        assert request.denial_reason == "first guardian"
