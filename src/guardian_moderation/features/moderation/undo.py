"""
Single-slot undo ledger.

Holds the most recent reversible action. Recording a new action replaces the
previous one, and a record is consumed by the first undo attempt whether or
not every item could be reverted.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Optional

from ...core.exceptions import UndoExpiredError
from ...core.logging import ProcessingTimer, get_logger
from .batch import run_sequentially
from .types import BatchActionRecord, BatchResult, ModerationAction

if TYPE_CHECKING:
    from ...core.protocols import Clock
    from .lifecycle import RequestLifecycle

logger = get_logger(__name__)


class UndoLedger:
    """Remembers the last reversible action and replays its inverse."""

    def __init__(self, lifecycle: RequestLifecycle, clock: Clock = time.time):
        self.lifecycle = lifecycle
        self.clock = clock
        self._record: Optional[BatchActionRecord] = None

    def record_reversible(self, record: BatchActionRecord) -> None:
        if self._record is not None:
            logger.debug(
                "Replacing undo record",
                previous_action=self._record.action.value,
                previous_size=len(self._record.request_ids),
            )
        self._record = record

    def peek(self) -> Optional[BatchActionRecord]:
        return self._record

    def seconds_remaining(self) -> float:
        """Seconds left before the current record expires, 0 if none."""
        if self._record is None:
            return 0.0
        elapsed = self.clock() - self._record.timestamp
        return max(0.0, self._record.window_s - elapsed)

    def clear(self) -> None:
        self._record = None

    async def undo(self) -> BatchResult:
        """Revert the recorded action.

        Raises UndoExpiredError when there is no record or its window has
        passed; the expired record is discarded either way.
        """
        record = self._record
        if record is None:
            raise UndoExpiredError(component="UndoLedger")

        self._record = None
        elapsed = self.clock() - record.timestamp
        if elapsed > record.window_s:
            logger.info(
                "Undo window expired",
                action=record.action.value,
                elapsed_s=round(elapsed, 3),
                window_s=record.window_s,
            )
            raise UndoExpiredError(elapsed, record.window_s, component="UndoLedger")

        if record.action == ModerationAction.APPROVE:
            inverse = self.lifecycle.undo_approval
        else:
            inverse = self.lifecycle.undo_denial

        async def operation(request_id: str) -> object:
            return await inverse(request_id, kind=record.kind)

        with ProcessingTimer(
            logger,
            "undo",
            "UndoLedger",
            action=record.action.value,
            size=len(record.request_ids),
        ):
            result = await run_sequentially(record.request_ids, operation)
        logger.log_batch_result(
            f"undo_{record.action.value}",
            record.kind.value,
            result.success_count,
            result.fail_count,
        )
        return result
