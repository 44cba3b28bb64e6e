"""
Partial approval of hierarchical requests.

An album request's tracks can be approved or revoked one at a time while the
guardian previews it. Closing out the review with only some tracks approved
moves the album to ``partially_approved``; individual track approvals never
change the album's status on their own.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Iterable, List, Optional

from ...core.exceptions import InvalidTransitionError
from ...core.logging import get_logger
from .types import (
    AlbumRequest,
    ChildApproval,
    ModerationRequest,
    RequestStatus,
    TrackInfo,
)

if TYPE_CHECKING:
    from ...core.protocols import Clock, RequestStore

logger = get_logger(__name__)

# Parent statuses under which tracks may still be toggled
TOGGLEABLE_STATUSES = frozenset(
    {
        RequestStatus.PENDING,
        RequestStatus.APPROVED,
        RequestStatus.PARTIALLY_APPROVED,
    }
)


class PartialApprovalResolver:
    """Track-level approvals and the complete-review transition for albums."""

    def __init__(self, store: RequestStore, clock: Clock = time.time):
        self.store = store
        self.clock = clock

    async def _get_hierarchical(
        self, parent_id: str, operation: str
    ) -> ModerationRequest:
        request = await self.store.get(parent_id)
        if not request.is_hierarchical:
            raise InvalidTransitionError(
                operation,
                request.status,
                reason=f"{request.kind.value} requests have no children",
                component="PartialApprovalResolver",
            )
        return request

    async def _get_toggleable(self, parent_id: str, operation: str) -> None:
        request = await self._get_hierarchical(parent_id, operation)
        if request.status not in TOGGLEABLE_STATUSES:
            raise InvalidTransitionError(
                operation, request.status, component="PartialApprovalResolver"
            )

    async def approve_child(
        self, parent_id: str, child_id: str, content_ref: Optional[str] = None
    ) -> ChildApproval:
        """Approve one track; the album's own status is left alone."""
        await self._get_toggleable(parent_id, "approve_child")
        child = await self.store.upsert_child_approval(
            parent_id, child_id, True, content_ref
        )
        logger.info("Child approved", parent_request_id=parent_id, child_id=child_id)
        return child

    async def revoke_child(self, parent_id: str, child_id: str) -> ChildApproval:
        """Revoke one track's approval; the album's own status is left alone."""
        await self._get_toggleable(parent_id, "revoke_child")
        child = await self.store.upsert_child_approval(parent_id, child_id, False)
        logger.info("Child revoked", parent_request_id=parent_id, child_id=child_id)
        return child

    async def approved_children(self, parent_id: str) -> List[ChildApproval]:
        children = await self.store.list_children(parent_id)
        return [child for child in children if child.approved]

    async def complete_review(
        self, parent_id: str, note: Optional[str] = None
    ) -> ModerationRequest:
        """Close a pending album review with only some tracks approved."""
        request = await self._get_hierarchical(parent_id, "complete_review")
        if request.status != RequestStatus.PENDING:
            raise InvalidTransitionError(
                "complete_review", request.status, component="PartialApprovalResolver"
            )

        approved = await self.approved_children(parent_id)
        if not approved:
            raise InvalidTransitionError(
                "complete_review",
                request.status,
                reason="no tracks have been approved",
                component="PartialApprovalResolver",
            )

        updated = await self.store.transition(
            parent_id,
            RequestStatus.PARTIALLY_APPROVED,
            {"reviewed_at": self.clock(), "reviewer_note": note},
            expected_status=RequestStatus.PENDING,
        )
        logger.log_transition(
            "complete_review",
            parent_id,
            request.status.value,
            updated.status.value,
            approved_children=len(approved),
        )
        return updated

    async def plan_materialization(
        self, request: AlbumRequest, tracks: Iterable[TrackInfo]
    ) -> List[TrackInfo]:
        """Tracks that an approval would newly approve."""
        already_approved = {child.id for child in await self.approved_children(request.id)}
        return [track for track in tracks if track.track_ref not in already_approved]

    async def materialize(self, request: AlbumRequest, tracks: Iterable[TrackInfo]) -> None:
        """Create approved child records for ``tracks``."""
        for track in tracks:
            await self.store.upsert_child_approval(
                request.id, track.track_ref, True, track.track_ref
            )

    async def revoke_children(
        self, parent_id: str, only: Optional[Iterable[str]] = None
    ) -> List[str]:
        """Revoke approved children, optionally limited to the ids in ``only``."""
        allowed = set(only) if only is not None else None
        revoked = []
        for child in await self.approved_children(parent_id):
            if allowed is not None and child.id not in allowed:
                continue
            await self.store.upsert_child_approval(parent_id, child.id, False)
            revoked.append(child.id)

        if revoked:
            logger.info(
                "Cascaded child revocation",
                parent_request_id=parent_id,
                revoked=len(revoked),
            )
        return revoked
