"""
Batch approve/deny over many requests of one kind.

Items are processed one after another. A failing item is recorded and the
run moves on; only a run where every item succeeded becomes undoable.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, List, Optional

from ...core.exceptions import ModerationError, StoreError
from ...core.logging import ProcessingTimer, get_logger
from .types import (
    BatchActionRecord,
    BatchResult,
    ItemFailure,
    ModerationAction,
    RequestKind,
)

if TYPE_CHECKING:
    from ...core.protocols import Clock
    from .lifecycle import RequestLifecycle
    from .undo import UndoLedger

logger = get_logger(__name__)

ItemOperation = Callable[[str], Awaitable[object]]


async def run_sequentially(request_ids: Iterable[str], operation: ItemOperation) -> BatchResult:
    """Run ``operation`` for each id in order and tally the outcomes."""
    result = BatchResult()
    for request_id in request_ids:
        error: Exception
        try:
            await operation(request_id)
            result.success_count += 1
            continue
        except ModerationError as e:
            error = e
        except Exception as e:
            error = StoreError(
                f"Unexpected failure for {request_id}: {e}", component="BatchCoordinator"
            )
            error.__cause__ = e

        result.fail_count += 1
        result.failures.append(ItemFailure(request_id, error))
        logger.warning(
            "Batch item failed", moderation_request_id=request_id, error=str(error)
        )
    return result


def unique_ids(request_ids: Iterable[str]) -> List[str]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(request_ids))


class BatchCoordinator:
    """Applies one action to many requests and registers the undo record."""

    def __init__(
        self,
        lifecycle: RequestLifecycle,
        undo_ledger: UndoLedger,
        clock: Clock = time.time,
        undo_window_s: float = 30.0,
    ):
        self.lifecycle = lifecycle
        self.undo_ledger = undo_ledger
        self.clock = clock
        self.undo_window_s = undo_window_s

    async def apply(
        self,
        action: ModerationAction,
        kind: RequestKind,
        request_ids: Iterable[str],
        denial_reason: Optional[str] = None,
    ) -> BatchResult:
        """Approve or deny every id; see BatchResult for the outcome."""
        ids = unique_ids(request_ids)

        if action == ModerationAction.APPROVE:

            async def operation(request_id: str) -> object:
                return await self.lifecycle.approve(request_id, kind=kind)

        else:

            async def operation(request_id: str) -> object:
                return await self.lifecycle.deny(request_id, denial_reason, kind=kind)

        with ProcessingTimer(
            logger, "batch_apply", "BatchCoordinator", action=action.value, size=len(ids)
        ):
            result = await run_sequentially(ids, operation)

        if result.all_succeeded:
            self.undo_ledger.record_reversible(
                BatchActionRecord(
                    action=action,
                    kind=kind,
                    request_ids=ids,
                    timestamp=self.clock(),
                    window_s=self.undo_window_s,
                )
            )
            result.undoable = True

        logger.log_batch_result(
            action.value,
            kind.value,
            result.success_count,
            result.fail_count,
            undoable=result.undoable,
        )
        return result
