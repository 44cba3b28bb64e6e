"""
JSON-file backed Request Store and blocked-search log.

Each store keeps its working set in memory and rewrites its JSON files
atomically after every mutation, so a crash loses at most the in-flight
operation. A mutation whose write fails is rolled back in memory too.
"""

import copy
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ...features.moderation.types import (
    BlockedSearchEntry,
    ChildApproval,
    ModerationRequest,
    RequestStatus,
    request_from_dict,
)
from ..exceptions import StoreError
from .base_manager import BaseDataManager
from .json_manager import JSONRepository
from .memory_store import InMemoryBlockedSearchLog, InMemoryRequestStore

logger = logging.getLogger(__name__)

REQUESTS_FILE = "requests.json"
CHILDREN_FILE = "child_approvals.json"
BLOCKED_SEARCHES_FILE = "blocked_searches.json"


class JSONRequestStore(BaseDataManager):
    """Request Store persisted as JSON files under ``storage_path``."""

    def __init__(self, storage_path: Path, clock: Callable[[], float] = time.time):
        super().__init__(storage_path, "JSONRequestStore")
        self._memory = InMemoryRequestStore(clock)

    async def _load_data(self) -> None:
        requests = JSONRepository.load_json_objects(
            self.storage_path / REQUESTS_FILE, request_from_dict
        )
        children = JSONRepository.load_json_objects(
            self.storage_path / CHILDREN_FILE, ChildApproval.from_dict
        )

        self._memory.all_requests().update(requests)
        for child in children.values():
            self._memory.all_children()[(child.parent_request_id, child.id)] = child
        logger.info(
            f"Loaded {len(requests)} requests and {len(children)} child approvals"
        )

    async def _save_data(self) -> None:
        self._save_requests()
        self._save_children()

    def _save_requests(self) -> None:
        if not JSONRepository.save_json_objects(
            self.storage_path / REQUESTS_FILE,
            self._memory.all_requests(),
            lambda request: request.to_dict(),
        ):
            raise StoreError("Failed to save requests", component=self.manager_name)

    def _save_children(self) -> None:
        children = {
            f"{parent_id}/{child_id}": child
            for (parent_id, child_id), child in self._memory.all_children().items()
        }
        if not JSONRepository.save_json_objects(
            self.storage_path / CHILDREN_FILE,
            children,
            lambda child: child.to_dict(),
        ):
            raise StoreError(
                "Failed to save child approvals", component=self.manager_name
            )

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    async def get(self, request_id: str) -> ModerationRequest:
        await self._ensure_initialized()
        return await self._memory.get(request_id)

    async def create(self, request: ModerationRequest) -> ModerationRequest:
        await self._ensure_initialized()
        created = await self._memory.create(request)
        try:
            self._save_requests()
        except StoreError:
            del self._memory.all_requests()[request.id]
            raise
        return created

    async def list_by_status(
        self, status: RequestStatus, kid_id: Optional[str] = None
    ) -> List[ModerationRequest]:
        await self._ensure_initialized()
        return await self._memory.list_by_status(status, kid_id)

    async def transition(
        self,
        request_id: str,
        next_status: RequestStatus,
        meta: Dict[str, Any],
        expected_status: Optional[RequestStatus] = None,
    ) -> ModerationRequest:
        await self._ensure_initialized()
        previous = self._memory.all_requests().get(request_id)
        updated = await self._memory.transition(
            request_id, next_status, meta, expected_status
        )
        try:
            self._save_requests()
        except StoreError:
            self._memory.all_requests()[request_id] = previous
            raise
        return updated

    async def upsert_child_approval(
        self,
        parent_request_id: str,
        child_id: str,
        approved: bool,
        content_ref: Optional[str] = None,
    ) -> ChildApproval:
        await self._ensure_initialized()
        key = (parent_request_id, child_id)
        previous = copy.deepcopy(self._memory.all_children().get(key))
        child = await self._memory.upsert_child_approval(
            parent_request_id, child_id, approved, content_ref
        )
        try:
            self._save_children()
        except StoreError:
            if previous is None:
                del self._memory.all_children()[key]
            else:
                self._memory.all_children()[key] = previous
            raise
        return child

    async def list_children(self, parent_request_id: str) -> List[ChildApproval]:
        await self._ensure_initialized()
        return await self._memory.list_children(parent_request_id)


class JSONBlockedSearchLog(BaseDataManager):
    """Blocked-search log persisted as a JSON file under ``storage_path``."""

    def __init__(self, storage_path: Path):
        super().__init__(storage_path, "JSONBlockedSearchLog")
        self._memory = InMemoryBlockedSearchLog()

    async def _load_data(self) -> None:
        entries = JSONRepository.load_json_objects(
            self.storage_path / BLOCKED_SEARCHES_FILE, BlockedSearchEntry.from_dict
        )
        for key, entry in entries.items():
            entry.entry_id = entry.entry_id or key
            self._memory.all_entries()[entry.entry_id] = entry
        logger.info(f"Loaded {len(entries)} blocked searches")

    async def _save_data(self) -> None:
        if not JSONRepository.save_json_objects(
            self.storage_path / BLOCKED_SEARCHES_FILE,
            self._memory.all_entries(),
            lambda entry: entry.to_dict(),
        ):
            raise StoreError(
                "Failed to save blocked searches", component=self.manager_name
            )

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    async def append(self, entry: BlockedSearchEntry) -> BlockedSearchEntry:
        await self._ensure_initialized()
        stored = await self._memory.append(entry)
        try:
            await self._save_data()
        except StoreError:
            del self._memory.all_entries()[stored.entry_id]
            raise
        return stored

    async def list(
        self, kid_id: Optional[str] = None, limit: int = 100
    ) -> List[BlockedSearchEntry]:
        await self._ensure_initialized()
        return await self._memory.list(kid_id, limit)

    async def unread_count(self, kid_id: Optional[str] = None) -> int:
        await self._ensure_initialized()
        return await self._memory.unread_count(kid_id)

    async def mark_read(self, entry_id: str) -> bool:
        await self._ensure_initialized()
        changed = await self._memory.mark_read(entry_id)
        if changed:
            await self._save_data()
        return changed

    async def mark_all_read(self, kid_id: Optional[str] = None) -> int:
        await self._ensure_initialized()
        count = await self._memory.mark_all_read(kid_id)
        if count:
            await self._save_data()
        return count

    async def delete(self, entry_id: str) -> bool:
        await self._ensure_initialized()
        removed = await self._memory.delete(entry_id)
        if removed:
            await self._save_data()
        return removed

    async def clear(self, kid_id: Optional[str] = None) -> int:
        await self._ensure_initialized()
        count = await self._memory.clear(kid_id)
        await self._save_data()
        return count
