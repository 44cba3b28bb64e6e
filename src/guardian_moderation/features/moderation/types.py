"""
Moderation types and data structures.

Contains enums, data classes, and type definitions for content requests,
child approvals, blocked searches and batch bookkeeping.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type


class RequestKind(Enum):
    """Kinds of content a kid can request."""

    ALBUM = "album"
    SONG = "song"
    VIDEO = "video"
    CHANNEL = "channel"


class RequestStatus(Enum):
    """Lifecycle states of a content request."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    PARTIALLY_APPROVED = "partially_approved"  # Albums only, via complete review


class ModerationAction(Enum):
    """Reversible actions a guardian can apply to one or many requests."""

    APPROVE = "approve"
    DENY = "deny"


@dataclass
class ModerationRequest:
    """Common lifecycle fields shared by every request kind."""

    kind: ClassVar[RequestKind]
    hierarchical: ClassVar[bool] = False

    id: str
    kid_id: str
    content_ref: str
    status: RequestStatus = RequestStatus.PENDING
    requested_at: float = field(default_factory=time.time)
    reviewed_at: Optional[float] = None
    denial_reason: Optional[str] = None
    reviewer_note: Optional[str] = None
    kid_note: Optional[str] = None

    @property
    def is_hierarchical(self) -> bool:
        return self.hierarchical

    @property
    def display_name(self) -> str:
        return self.content_ref

    def _extra_fields(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "id": self.id,
            "kid_id": self.kid_id,
            "content_ref": self.content_ref,
            "status": self.status.value,
            "requested_at": self.requested_at,
            "reviewed_at": self.reviewed_at,
            "denial_reason": self.denial_reason,
            "reviewer_note": self.reviewer_note,
            "kid_note": self.kid_note,
            **self._extra_fields(),
        }


@dataclass
class AlbumRequest(ModerationRequest):
    """A request for a whole album; its tracks can be approved one by one."""

    kind: ClassVar[RequestKind] = RequestKind.ALBUM
    hierarchical: ClassVar[bool] = True

    album_name: str = ""
    artist_name: str = ""
    artwork_url: Optional[str] = None
    # Child approval ids created by the most recent approve/override
    materialized_children: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.album_name or self.content_ref

    def _extra_fields(self) -> Dict[str, Any]:
        return {
            "album_name": self.album_name,
            "artist_name": self.artist_name,
            "artwork_url": self.artwork_url,
            "materialized_children": list(self.materialized_children),
        }


@dataclass
class SongRequest(ModerationRequest):
    """A request for a single song."""

    kind: ClassVar[RequestKind] = RequestKind.SONG

    song_name: str = ""
    artist_name: str = ""
    album_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.song_name or self.content_ref

    def _extra_fields(self) -> Dict[str, Any]:
        return {
            "song_name": self.song_name,
            "artist_name": self.artist_name,
            "album_name": self.album_name,
        }


@dataclass
class VideoRequest(ModerationRequest):
    """A request for a single video."""

    kind: ClassVar[RequestKind] = RequestKind.VIDEO

    title: str = ""
    channel_title: str = ""
    duration_s: Optional[int] = None

    @property
    def display_name(self) -> str:
        return self.title or self.content_ref

    def _extra_fields(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "channel_title": self.channel_title,
            "duration_s": self.duration_s,
        }


@dataclass
class ChannelRequest(ModerationRequest):
    """A request to allow a whole channel."""

    kind: ClassVar[RequestKind] = RequestKind.CHANNEL

    channel_title: str = ""
    subscriber_count: Optional[int] = None

    @property
    def display_name(self) -> str:
        return self.channel_title or self.content_ref

    def _extra_fields(self) -> Dict[str, Any]:
        return {
            "channel_title": self.channel_title,
            "subscriber_count": self.subscriber_count,
        }


REQUEST_TYPES: Dict[RequestKind, Type[ModerationRequest]] = {
    RequestKind.ALBUM: AlbumRequest,
    RequestKind.SONG: SongRequest,
    RequestKind.VIDEO: VideoRequest,
    RequestKind.CHANNEL: ChannelRequest,
}


def request_from_dict(data: Dict[str, Any]) -> ModerationRequest:
    """Rebuild the right request variant from its serialized form."""
    payload = dict(data)
    kind = RequestKind(payload.pop("kind"))
    payload["status"] = RequestStatus(payload.get("status", "pending"))
    return REQUEST_TYPES[kind](**payload)


@dataclass
class ChildApproval:
    """Independent approve/revoke flag on one track beneath an album request."""

    id: str
    parent_request_id: str
    content_ref: str
    approved: bool = False
    updated_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "parent_request_id": self.parent_request_id,
            "content_ref": self.content_ref,
            "approved": self.approved,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChildApproval":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            parent_request_id=data["parent_request_id"],
            content_ref=data.get("content_ref", data["id"]),
            approved=data.get("approved", False),
            updated_at=data.get("updated_at", time.time()),
        )


@dataclass
class TrackInfo:
    """One track as listed by the catalog provider."""

    track_ref: str
    name: str
    artist: str = ""
    duration_ms: Optional[int] = None
    explicit: bool = False


@dataclass
class BlockedSearchEntry:
    """A search query that the safety filter refused."""

    query: str
    matched_keyword: str
    kid_id: str
    searched_at: float = field(default_factory=time.time)
    read: bool = False
    entry_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "entry_id": self.entry_id,
            "query": self.query,
            "matched_keyword": self.matched_keyword,
            "kid_id": self.kid_id,
            "searched_at": self.searched_at,
            "read": self.read,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BlockedSearchEntry":
        """Create from dictionary."""
        return cls(
            query=data["query"],
            matched_keyword=data.get("matched_keyword", ""),
            kid_id=data["kid_id"],
            searched_at=data.get("searched_at", time.time()),
            read=data.get("read", False),
            entry_id=data.get("entry_id"),
        )


@dataclass
class BatchActionRecord:
    """The most recent reversible action, kept by the undo ledger."""

    action: ModerationAction
    kind: RequestKind
    request_ids: List[str]
    timestamp: float
    window_s: float = 30.0


@dataclass
class ItemFailure:
    """One failed item in a batch or undo run."""

    request_id: str
    error: Exception

    def to_dict(self) -> Dict[str, Any]:
        error_dict = getattr(self.error, "to_dict", None)
        return {
            "request_id": self.request_id,
            "error": error_dict() if error_dict else str(self.error),
        }


@dataclass
class BatchResult:
    """Aggregate outcome of a batch or undo run."""

    success_count: int = 0
    fail_count: int = 0
    failures: List[ItemFailure] = field(default_factory=list)
    undoable: bool = False

    @property
    def all_succeeded(self) -> bool:
        return self.fail_count == 0 and self.success_count > 0

    def summary(self, verb: str) -> str:
        """Human-readable counts, e.g. '3 approved, 1 failed'."""
        if self.fail_count == 0:
            plural = "s" if self.success_count != 1 else ""
            return f"{self.success_count} request{plural} {verb}"
        return f"{self.success_count} {verb}, {self.fail_count} failed"
