"""
Moderation engine facade.

Wires the lifecycle, partial approval, batch, undo and search components
around one Request Store and exposes the operations a guardian dashboard
or the kid-facing search surface call.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence

from ...algorithms.safety import VIDEO_TEXT_FIELDS, MatchResult, QueryValidation, SafetyFilter
from ...core.exceptions import ValidationError
from ...core.logging import get_logger
from .batch import BatchCoordinator
from .lifecycle import RequestLifecycle
from .partial_approval import PartialApprovalResolver
from .search_guard import SearchGuard
from .types import (
    BatchActionRecord,
    BatchResult,
    ChildApproval,
    ModerationAction,
    ModerationRequest,
    RequestKind,
    RequestStatus,
)
from .undo import UndoLedger

if TYPE_CHECKING:
    from ...core.config import Config
    from ...core.protocols import BlockedSearchLog, CatalogProvider, Clock, RequestStore

logger = get_logger(__name__)


class ModerationEngine:
    """Entry point for guardian moderation and kid search checks."""

    def __init__(
        self,
        store: RequestStore,
        catalog: Optional[CatalogProvider] = None,
        blocked_log: Optional[BlockedSearchLog] = None,
        safety_filter: Optional[SafetyFilter] = None,
        clock: Clock = time.time,
        batch_undo_window_s: float = 30.0,
        single_item_undo_window_s: float = 60.0,
        single_item_undo_enabled: bool = True,
        materialize_children: bool = True,
        dedupe_pending_requests: bool = True,
        log_blocked_searches: bool = True,
    ):
        self.store = store
        self.clock = clock
        self.single_item_undo_window_s = single_item_undo_window_s
        self.single_item_undo_enabled = single_item_undo_enabled
        self.dedupe_pending_requests = dedupe_pending_requests

        self.resolver = PartialApprovalResolver(store, clock)
        self.lifecycle = RequestLifecycle(
            store,
            catalog=catalog,
            clock=clock,
            resolver=self.resolver,
            materialize_children=materialize_children,
        )
        self.undo_ledger = UndoLedger(self.lifecycle, clock)
        self.batch = BatchCoordinator(
            self.lifecycle, self.undo_ledger, clock, undo_window_s=batch_undo_window_s
        )
        self.safety_filter = safety_filter or SafetyFilter()
        self.search_guard = SearchGuard(
            self.safety_filter, blocked_log, clock, log_blocked=log_blocked_searches
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        store: RequestStore,
        catalog: Optional[CatalogProvider] = None,
        blocked_log: Optional[BlockedSearchLog] = None,
        clock: Clock = time.time,
    ) -> "ModerationEngine":
        moderation = config.moderation
        return cls(
            store,
            catalog=catalog,
            blocked_log=blocked_log,
            safety_filter=SafetyFilter.from_config(config.safety),
            clock=clock,
            batch_undo_window_s=moderation.batch_undo_window_s,
            single_item_undo_window_s=moderation.single_item_undo_window_s,
            single_item_undo_enabled=moderation.single_item_undo_enabled,
            materialize_children=moderation.materialize_children_on_approve,
            dedupe_pending_requests=moderation.dedupe_pending_requests,
            log_blocked_searches=config.safety.log_blocked_searches,
        )

    # Requests

    async def submit_request(self, request: ModerationRequest) -> ModerationRequest:
        """Store a new pending request.

        If the kid already has a pending request for the same content, that
        request is returned instead of creating a duplicate.
        """
        if request.status != RequestStatus.PENDING:
            raise ValidationError(
                "status",
                request.status.value,
                "new requests must be pending",
                component="ModerationEngine",
            )

        if self.dedupe_pending_requests:
            for existing in await self.store.list_by_status(
                RequestStatus.PENDING, request.kid_id
            ):
                if (
                    existing.kind == request.kind
                    and existing.content_ref == request.content_ref
                ):
                    logger.info(
                        "Duplicate request ignored",
                        moderation_request_id=existing.id,
                        content_ref=request.content_ref,
                    )
                    return existing

        created = await self.store.create(request)
        logger.info(
            "Request submitted",
            moderation_request_id=created.id,
            kind=created.kind.value,
        )
        return created

    async def get_request(self, request_id: str) -> ModerationRequest:
        return await self.store.get(request_id)

    async def list_pending(self, kid_id: Optional[str] = None) -> List[ModerationRequest]:
        return await self.store.list_by_status(RequestStatus.PENDING, kid_id)

    async def list_denied(self, kid_id: Optional[str] = None) -> List[ModerationRequest]:
        return await self.store.list_by_status(RequestStatus.DENIED, kid_id)

    async def list_by_status(
        self, status: RequestStatus, kid_id: Optional[str] = None
    ) -> List[ModerationRequest]:
        return await self.store.list_by_status(status, kid_id)

    async def list_children(self, parent_id: str) -> List[ChildApproval]:
        return await self.store.list_children(parent_id)

    # Lifecycle

    async def approve(self, request_id: str, undoable: bool = True) -> ModerationRequest:
        request = await self.lifecycle.approve(request_id)
        if undoable:
            self._record_single(ModerationAction.APPROVE, request)
        return request

    async def deny(
        self, request_id: str, reason: Optional[str] = None, undoable: bool = True
    ) -> ModerationRequest:
        request = await self.lifecycle.deny(request_id, reason)
        if undoable:
            self._record_single(ModerationAction.DENY, request)
        return request

    def _record_single(
        self, action: ModerationAction, request: ModerationRequest
    ) -> None:
        if not self.single_item_undo_enabled:
            return
        self.undo_ledger.record_reversible(
            BatchActionRecord(
                action=action,
                kind=request.kind,
                request_ids=[request.id],
                timestamp=self.clock(),
                window_s=self.single_item_undo_window_s,
            )
        )

    async def approve_override(self, request_id: str) -> ModerationRequest:
        return await self.lifecycle.approve_override(request_id)

    async def undo_approval(self, request_id: str) -> ModerationRequest:
        return await self.lifecycle.undo_approval(request_id)

    async def undo_denial(self, request_id: str) -> ModerationRequest:
        return await self.lifecycle.undo_denial(request_id)

    # Partial approval

    async def approve_child(
        self, parent_id: str, child_id: str, content_ref: Optional[str] = None
    ) -> ChildApproval:
        return await self.resolver.approve_child(parent_id, child_id, content_ref)

    async def revoke_child(self, parent_id: str, child_id: str) -> ChildApproval:
        return await self.resolver.revoke_child(parent_id, child_id)

    async def complete_review(
        self, parent_id: str, note: Optional[str] = None
    ) -> ModerationRequest:
        return await self.resolver.complete_review(parent_id, note)

    # Batch and undo

    async def apply_batch(
        self,
        action: ModerationAction,
        kind: RequestKind,
        request_ids: Iterable[str],
        denial_reason: Optional[str] = None,
    ) -> BatchResult:
        return await self.batch.apply(action, kind, request_ids, denial_reason)

    async def undo(self) -> BatchResult:
        return await self.undo_ledger.undo()

    def undo_seconds_remaining(self) -> float:
        return self.undo_ledger.seconds_remaining()

    # Safety

    def classify(self, text: Optional[str]) -> Optional[MatchResult]:
        return self.safety_filter.classify(text)

    async def check_query(self, query: Optional[str], kid_id: str) -> QueryValidation:
        return await self.search_guard.check_query(query, kid_id)

    def filter_results(
        self, items: Iterable[Any], text_fields: Sequence[str] = VIDEO_TEXT_FIELDS
    ) -> List[Any]:
        return self.search_guard.filter_results(items, text_fields)


def create_moderation_engine(
    config: Config,
    store: RequestStore,
    catalog: Optional[CatalogProvider] = None,
    blocked_log: Optional[BlockedSearchLog] = None,
) -> ModerationEngine:
    """Create a moderation engine configured from ``config``."""
    return ModerationEngine.from_config(
        config, store, catalog=catalog, blocked_log=blocked_log
    )
