"""
Content request moderation feature package.

Provides the request lifecycle, partial approval of albums, batch actions
with undo, and the kid-facing search gate.
"""

from .batch import BatchCoordinator
from .catalog import StaticCatalogProvider
from .engine import ModerationEngine, create_moderation_engine
from .lifecycle import RequestLifecycle
from .partial_approval import PartialApprovalResolver
from .search_guard import SearchGuard
from .types import (
    REQUEST_TYPES,
    AlbumRequest,
    BatchActionRecord,
    BatchResult,
    BlockedSearchEntry,
    ChannelRequest,
    ChildApproval,
    ItemFailure,
    ModerationAction,
    ModerationRequest,
    RequestKind,
    RequestStatus,
    SongRequest,
    TrackInfo,
    VideoRequest,
    request_from_dict,
)
from .undo import UndoLedger

__all__ = [
    # Engine
    "ModerationEngine",
    "create_moderation_engine",
    # Components
    "RequestLifecycle",
    "PartialApprovalResolver",
    "BatchCoordinator",
    "UndoLedger",
    "SearchGuard",
    "StaticCatalogProvider",
    # Types
    "RequestKind",
    "RequestStatus",
    "ModerationAction",
    "ModerationRequest",
    "AlbumRequest",
    "SongRequest",
    "VideoRequest",
    "ChannelRequest",
    "REQUEST_TYPES",
    "request_from_dict",
    "ChildApproval",
    "TrackInfo",
    "BlockedSearchEntry",
    "BatchActionRecord",
    "BatchResult",
    "ItemFailure",
]
