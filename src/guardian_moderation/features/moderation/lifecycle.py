"""
Request lifecycle state machine.

Every status change of a content request goes through one of the named
transitions below; each transition checks the current status, writes the
new status through the Request Store, and for albums keeps the track-level
approvals consistent with the album's decision.

    pending  --approve-------------> approved
    pending  --deny----------------> denied
    denied   --approve_override----> approved
    approved --undo_approval-------> pending
    denied   --undo_denial---------> pending
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ...core.exceptions import InvalidTransitionError, ValidationError
from ...core.logging import get_logger
from .partial_approval import PartialApprovalResolver
from .types import (
    AlbumRequest,
    ModerationRequest,
    RequestKind,
    RequestStatus,
    TrackInfo,
)

if TYPE_CHECKING:
    from ...core.protocols import CatalogProvider, Clock, RequestStore

logger = get_logger(__name__)


class RequestLifecycle:
    """Named transitions over a single content request."""

    def __init__(
        self,
        store: RequestStore,
        catalog: Optional[CatalogProvider] = None,
        clock: Clock = time.time,
        resolver: Optional[PartialApprovalResolver] = None,
        materialize_children: bool = True,
    ):
        self.store = store
        self.catalog = catalog
        self.clock = clock
        self.resolver = resolver or PartialApprovalResolver(store, clock)
        self.materialize_children = materialize_children

    async def _load(
        self,
        request_id: str,
        operation: str,
        allowed: RequestStatus,
        kind: Optional[RequestKind] = None,
    ) -> ModerationRequest:
        request = await self.store.get(request_id)
        if kind is not None and request.kind != kind:
            raise ValidationError(
                "kind",
                request.kind.value,
                f"expected a {kind.value} request",
                component="RequestLifecycle",
            )
        if request.status != allowed:
            raise InvalidTransitionError(
                operation, request.status, component="RequestLifecycle"
            )
        return request

    async def _transition(
        self,
        request: ModerationRequest,
        operation: str,
        next_status: RequestStatus,
        meta: Dict[str, Any],
    ) -> ModerationRequest:
        updated = await self.store.transition(
            request.id, next_status, meta, expected_status=request.status
        )
        logger.log_transition(
            operation,
            request.id,
            request.status.value,
            next_status.value,
            kind=request.kind.value,
        )
        return updated

    async def approve(
        self, request_id: str, kind: Optional[RequestKind] = None
    ) -> ModerationRequest:
        """Approve a pending request; albums also get every track approved."""
        request = await self._load(request_id, "approve", RequestStatus.PENDING, kind)
        return await self._approve(request, "approve", {})

    async def approve_override(
        self, request_id: str, kind: Optional[RequestKind] = None
    ) -> ModerationRequest:
        """Approve a previously denied request.

        Calling it again once the request is approved returns the request
        unchanged.
        """
        request = await self.store.get(request_id)
        if request.status == RequestStatus.APPROVED and (
            kind is None or request.kind == kind
        ):
            logger.debug(
                "Override on approved request ignored",
                moderation_request_id=request_id,
            )
            return request

        request = await self._load(
            request_id, "approve_override", RequestStatus.DENIED, kind
        )
        return await self._approve(request, "approve_override", {"denial_reason": None})

    async def _approve(
        self, request: ModerationRequest, operation: str, meta: Dict[str, Any]
    ) -> ModerationRequest:
        meta = {"reviewed_at": self.clock(), **meta}

        if not isinstance(request, AlbumRequest):
            return await self._transition(request, operation, RequestStatus.APPROVED, meta)

        tracks = await self._fetch_tracks(request)
        new_tracks = await self.resolver.plan_materialization(request, tracks)
        meta["materialized_children"] = [track.track_ref for track in new_tracks]

        updated = await self._transition(request, operation, RequestStatus.APPROVED, meta)
        await self.resolver.materialize(request, tracks)
        return updated

    async def _fetch_tracks(self, request: AlbumRequest) -> List[TrackInfo]:
        """List the album's tracks; an unavailable catalog yields none."""
        if not self.materialize_children or self.catalog is None:
            return []
        try:
            return list(await self.catalog.list_tracks(request.content_ref))
        except Exception as e:
            logger.warning(
                "Catalog lookup failed, approving without tracks",
                moderation_request_id=request.id,
                content_ref=request.content_ref,
                error=str(e),
            )
            return []

    async def deny(
        self,
        request_id: str,
        reason: Optional[str] = None,
        kind: Optional[RequestKind] = None,
    ) -> ModerationRequest:
        """Deny a pending request; albums lose any track approvals."""
        request = await self._load(request_id, "deny", RequestStatus.PENDING, kind)
        meta: Dict[str, Any] = {
            "reviewed_at": self.clock(),
            "denial_reason": (reason or "").strip(),
        }
        if isinstance(request, AlbumRequest):
            meta["materialized_children"] = []

        updated = await self._transition(request, "deny", RequestStatus.DENIED, meta)
        if request.is_hierarchical:
            await self.resolver.revoke_children(request.id)
        return updated

    async def undo_approval(
        self, request_id: str, kind: Optional[RequestKind] = None
    ) -> ModerationRequest:
        """Send an approved request back to pending."""
        request = await self._load(
            request_id, "undo_approval", RequestStatus.APPROVED, kind
        )
        meta: Dict[str, Any] = {"reviewed_at": None, "denial_reason": None}

        materialized: List[str] = []
        if isinstance(request, AlbumRequest):
            materialized = list(request.materialized_children)
            meta["materialized_children"] = []

        updated = await self._transition(
            request, "undo_approval", RequestStatus.PENDING, meta
        )
        if materialized:
            await self.resolver.revoke_children(request.id, only=materialized)
        return updated

    async def undo_denial(
        self, request_id: str, kind: Optional[RequestKind] = None
    ) -> ModerationRequest:
        """Send a denied request back to pending."""
        request = await self._load(request_id, "undo_denial", RequestStatus.DENIED, kind)
        return await self._transition(
            request,
            "undo_denial",
            RequestStatus.PENDING,
            {"reviewed_at": None, "denial_reason": None},
        )
