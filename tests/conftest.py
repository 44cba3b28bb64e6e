"""
Pytest configuration and fixtures for the Guardian moderation engine.
Collaborators are in-memory; failures are injected per test.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, Optional, Set

import pytest

from guardian_moderation.core.config import Config, Environment, StorageConfig
from guardian_moderation.core.persistence import (
    InMemoryBlockedSearchLog,
    InMemoryRequestStore,
)
from guardian_moderation.features.moderation import (
    AlbumRequest,
    ModerationEngine,
    ModerationRequest,
    RequestStatus,
    SongRequest,
    StaticCatalogProvider,
    TrackInfo,
    VideoRequest,
)

START_TIME = 1_700_000_000.0


class FakeClock:
    """Manually advanced clock returning POSIX seconds."""

    def __init__(self, start: float = START_TIME):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingStore:
    """Wraps a store and raises a non-moderation error for chosen ids."""

    def __init__(self, inner: InMemoryRequestStore, fail_ids: Optional[Set[str]] = None):
        self.inner = inner
        self.fail_ids = set(fail_ids or ())

    def __getattr__(self, name: str) -> Any:
        return getattr(self.inner, name)

    async def transition(
        self,
        request_id: str,
        next_status: RequestStatus,
        meta: Dict[str, Any],
        expected_status: Optional[RequestStatus] = None,
    ) -> ModerationRequest:
        if request_id in self.fail_ids:
            raise RuntimeError("connection reset")
        return await self.inner.transition(request_id, next_status, meta, expected_status)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    return Config(
        environment=Environment.TESTING,
        storage=StorageConfig(data_dir=temp_dir / "data"),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryRequestStore:
    return InMemoryRequestStore(clock)


@pytest.fixture
def blocked_log() -> InMemoryBlockedSearchLog:
    return InMemoryBlockedSearchLog()


@pytest.fixture
def catalog() -> StaticCatalogProvider:
    return StaticCatalogProvider(
        {
            "album-bluey": [
                TrackInfo("track-1", "Bluey Theme Tune"),
                TrackInfo("track-2", "Keepy Uppy"),
                TrackInfo("track-3", "Rug Island"),
            ]
        }
    )


@pytest.fixture
def engine(
    store: InMemoryRequestStore,
    catalog: StaticCatalogProvider,
    blocked_log: InMemoryBlockedSearchLog,
    clock: FakeClock,
) -> ModerationEngine:
    return ModerationEngine(store, catalog=catalog, blocked_log=blocked_log, clock=clock)


def make_album(request_id: str = "req-album", kid_id: str = "kid-1", **kwargs: Any) -> AlbumRequest:
    kwargs.setdefault("content_ref", "album-bluey")
    kwargs.setdefault("album_name", "Bluey: The Album")
    kwargs.setdefault("requested_at", START_TIME)
    return AlbumRequest(id=request_id, kid_id=kid_id, **kwargs)


def make_song(request_id: str, kid_id: str = "kid-1", **kwargs: Any) -> SongRequest:
    kwargs.setdefault("content_ref", f"song-{request_id}")
    kwargs.setdefault("song_name", f"Song {request_id}")
    kwargs.setdefault("requested_at", START_TIME)
    return SongRequest(id=request_id, kid_id=kid_id, **kwargs)


def make_video(request_id: str, kid_id: str = "kid-1", **kwargs: Any) -> VideoRequest:
    kwargs.setdefault("content_ref", f"video-{request_id}")
    kwargs.setdefault("title", f"Video {request_id}")
    kwargs.setdefault("requested_at", START_TIME)
    return VideoRequest(id=request_id, kid_id=kid_id, **kwargs)
