"""
Protocols and interfaces for the Guardian moderation engine.

Defines the collaborator contracts the engine consumes: the Request Store,
the Catalog Provider and the blocked-search log. Every call is a suspension
point; implementations may be backed by any persistence technology.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol

from ..features.moderation.types import (
    BlockedSearchEntry,
    ChildApproval,
    ModerationRequest,
    RequestStatus,
    TrackInfo,
)

# Returns the current POSIX time in seconds
Clock = Callable[[], float]


class RequestStore(Protocol):
    """Durable store of request records with atomic per-record transitions."""

    async def get(self, request_id: str) -> ModerationRequest:
        """Return a copy of the record, raising RequestNotFoundError if unknown."""
        ...

    async def create(self, request: ModerationRequest) -> ModerationRequest:
        ...

    async def list_by_status(
        self, status: RequestStatus, kid_id: Optional[str] = None
    ) -> List[ModerationRequest]:
        ...

    async def transition(
        self,
        request_id: str,
        next_status: RequestStatus,
        meta: Dict[str, Any],
        expected_status: Optional[RequestStatus] = None,
    ) -> ModerationRequest:
        """Move a record to ``next_status`` and apply ``meta`` field updates.

        When ``expected_status`` is given the store must reject the write with
        ConcurrentModificationError if the stored status differs.
        """
        ...

    async def upsert_child_approval(
        self,
        parent_request_id: str,
        child_id: str,
        approved: bool,
        content_ref: Optional[str] = None,
    ) -> ChildApproval:
        ...

    async def list_children(self, parent_request_id: str) -> List[ChildApproval]:
        ...


class CatalogProvider(Protocol):
    """Read-only track listing for hierarchical content."""

    async def list_tracks(self, content_ref: str) -> List[TrackInfo]:
        ...


class BlockedSearchLog(Protocol):
    """Append-only log of refused search queries."""

    async def append(self, entry: BlockedSearchEntry) -> BlockedSearchEntry:
        ...

    async def mark_all_read(self, kid_id: Optional[str] = None) -> int:
        ...

    async def list(
        self, kid_id: Optional[str] = None, limit: int = 100
    ) -> List[BlockedSearchEntry]:
        ...

    async def unread_count(self, kid_id: Optional[str] = None) -> int:
        ...
