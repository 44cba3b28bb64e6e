"""
Kid-facing search gate.

Validates search queries against the safety filter before any upstream
search runs, records refused queries in the blocked-search log for the
guardian, and filters result lists on the way back.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence

from ...algorithms.safety import VIDEO_TEXT_FIELDS, QueryValidation, SafetyFilter
from ...core.logging import get_logger
from .types import BlockedSearchEntry

if TYPE_CHECKING:
    from ...core.protocols import BlockedSearchLog, Clock

logger = get_logger(__name__)


class SearchGuard:
    """Query validation plus blocked-search bookkeeping."""

    def __init__(
        self,
        safety_filter: SafetyFilter,
        blocked_log: Optional[BlockedSearchLog] = None,
        clock: Clock = time.time,
        log_blocked: bool = True,
    ):
        self.safety_filter = safety_filter
        self.blocked_log = blocked_log
        self.clock = clock
        self.log_blocked = log_blocked

    async def check_query(self, query: Optional[str], kid_id: str) -> QueryValidation:
        validation = self.safety_filter.validate_query(query)
        if validation.valid or validation.matched_keyword is None:
            return validation

        text = str(query).strip()
        logger.log_safety_event(
            "blocked_search", validation.matched_keyword, text, kid=kid_id
        )
        if self.blocked_log is not None and self.log_blocked:
            await self._record(text, validation.matched_keyword, kid_id)
        return validation

    async def _record(self, query: str, keyword: str, kid_id: str) -> None:
        entry = BlockedSearchEntry(
            query=query,
            matched_keyword=keyword,
            kid_id=kid_id,
            searched_at=self.clock(),
        )
        try:
            await self.blocked_log.append(entry)
        except Exception as e:
            # The kid still gets the friendly refusal
            logger.error("Failed to log blocked search", kid=kid_id, error=str(e))

    def filter_results(
        self, items: Iterable[Any], text_fields: Sequence[str] = VIDEO_TEXT_FIELDS
    ) -> List[Any]:
        return self.safety_filter.filter_results(items, text_fields)
