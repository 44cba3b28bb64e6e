"""
In-memory implementations of the Request Store and blocked-search log.

Records are deep-copied on the way in and out so callers can only change
stored state through the named store operations.
"""

import copy
import logging
import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from ...features.moderation.types import (
    BlockedSearchEntry,
    ChildApproval,
    ModerationRequest,
    RequestStatus,
)
from ..exceptions import (
    ConcurrentModificationError,
    RequestNotFoundError,
    StoreError,
)

logger = logging.getLogger(__name__)

# Fields a transition may write besides status
TRANSITION_FIELDS = frozenset(
    {"reviewed_at", "denial_reason", "reviewer_note", "materialized_children"}
)


def apply_transition(
    record: ModerationRequest, next_status: RequestStatus, meta: Dict[str, Any]
) -> None:
    """Write ``next_status`` and the allowed ``meta`` fields onto ``record``."""
    unknown = set(meta) - TRANSITION_FIELDS
    if unknown:
        raise StoreError(
            f"Unsupported transition fields: {', '.join(sorted(unknown))}",
            component="RequestStore",
        )

    record.status = next_status
    for key, value in meta.items():
        if key == "materialized_children" and not hasattr(record, key):
            continue
        setattr(record, key, copy.deepcopy(value))


class InMemoryRequestStore:
    """Request Store kept in process memory."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.clock = clock
        self._requests: Dict[str, ModerationRequest] = {}
        self._children: Dict[Tuple[str, str], ChildApproval] = {}

    async def get(self, request_id: str) -> ModerationRequest:
        record = self._requests.get(request_id)
        if record is None:
            raise RequestNotFoundError(request_id, component="RequestStore")
        return copy.deepcopy(record)

    async def create(self, request: ModerationRequest) -> ModerationRequest:
        if request.id in self._requests:
            raise StoreError(
                f"Request already exists: {request.id}", component="RequestStore"
            )
        self._requests[request.id] = copy.deepcopy(request)
        return copy.deepcopy(request)

    async def list_by_status(
        self, status: RequestStatus, kid_id: Optional[str] = None
    ) -> List[ModerationRequest]:
        matches = [
            r
            for r in self._requests.values()
            if r.status == status and (kid_id is None or r.kid_id == kid_id)
        ]
        matches.sort(key=lambda r: r.requested_at, reverse=True)
        return [copy.deepcopy(r) for r in matches]

    async def transition(
        self,
        request_id: str,
        next_status: RequestStatus,
        meta: Dict[str, Any],
        expected_status: Optional[RequestStatus] = None,
    ) -> ModerationRequest:
        record = self._requests.get(request_id)
        if record is None:
            raise RequestNotFoundError(request_id, component="RequestStore")
        if expected_status is not None and record.status != expected_status:
            raise ConcurrentModificationError(
                request_id, expected_status, record.status, component="RequestStore"
            )

        updated = copy.deepcopy(record)
        apply_transition(updated, next_status, meta)
        self._requests[request_id] = updated
        return copy.deepcopy(updated)

    async def upsert_child_approval(
        self,
        parent_request_id: str,
        child_id: str,
        approved: bool,
        content_ref: Optional[str] = None,
    ) -> ChildApproval:
        if parent_request_id not in self._requests:
            raise RequestNotFoundError(parent_request_id, component="RequestStore")

        key = (parent_request_id, child_id)
        child = self._children.get(key)
        if child is None:
            child = ChildApproval(
                id=child_id,
                parent_request_id=parent_request_id,
                content_ref=content_ref or child_id,
            )
            self._children[key] = child
        child.approved = approved
        child.updated_at = self.clock()
        return copy.deepcopy(child)

    async def list_children(self, parent_request_id: str) -> List[ChildApproval]:
        return [
            copy.deepcopy(child)
            for (parent_id, _), child in self._children.items()
            if parent_id == parent_request_id
        ]

    def all_requests(self) -> Dict[str, ModerationRequest]:
        return self._requests

    def all_children(self) -> Dict[Tuple[str, str], ChildApproval]:
        return self._children


class InMemoryBlockedSearchLog:
    """Blocked-search log kept in process memory."""

    def __init__(self) -> None:
        self._entries: Dict[str, BlockedSearchEntry] = {}

    async def append(self, entry: BlockedSearchEntry) -> BlockedSearchEntry:
        stored = copy.deepcopy(entry)
        if not stored.entry_id:
            stored.entry_id = str(uuid.uuid4())
        self._entries[stored.entry_id] = stored
        return copy.deepcopy(stored)

    async def list(
        self, kid_id: Optional[str] = None, limit: int = 100
    ) -> List[BlockedSearchEntry]:
        entries = [e for e in self._entries.values() if kid_id in (None, e.kid_id)]
        entries.sort(key=lambda e: e.searched_at, reverse=True)
        return [copy.deepcopy(e) for e in entries[:limit]]

    async def unread_count(self, kid_id: Optional[str] = None) -> int:
        return sum(
            1
            for e in self._entries.values()
            if not e.read and kid_id in (None, e.kid_id)
        )

    async def mark_read(self, entry_id: str) -> bool:
        entry = self._entries.get(entry_id)
        if entry is None:
            return False
        entry.read = True
        return True

    async def mark_all_read(self, kid_id: Optional[str] = None) -> int:
        count = 0
        for entry in self._entries.values():
            if not entry.read and kid_id in (None, entry.kid_id):
                entry.read = True
                count += 1
        return count

    async def delete(self, entry_id: str) -> bool:
        return self._entries.pop(entry_id, None) is not None

    async def clear(self, kid_id: Optional[str] = None) -> int:
        doomed = [
            entry_id
            for entry_id, e in self._entries.items()
            if kid_id in (None, e.kid_id)
        ]
        for entry_id in doomed:
            del self._entries[entry_id]
        logger.info(f"Cleared {len(doomed)} blocked searches")
        return len(doomed)

    def all_entries(self) -> Dict[str, BlockedSearchEntry]:
        return self._entries
