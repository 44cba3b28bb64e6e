"""
Static catalog provider.

Serves track listings from an in-process mapping or a YAML file, for
deployments without a live music catalog and for tests.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ...core.config.yaml_loader import YAMLConfigLoader
from ...core.exceptions import CatalogError
from .types import TrackInfo

logger = logging.getLogger(__name__)


class StaticCatalogProvider:
    """Catalog provider backed by a fixed album -> tracks mapping."""

    def __init__(self, albums: Optional[Mapping[str, Iterable[TrackInfo]]] = None):
        self._albums: Dict[str, List[TrackInfo]] = {
            ref: list(tracks) for ref, tracks in (albums or {}).items()
        }

    @classmethod
    def from_yaml(cls, path: Path) -> "StaticCatalogProvider":
        """Load ``{album_ref: [{track_ref, name, ...}, ...]}`` from YAML."""
        data = YAMLConfigLoader.load_yaml(path)
        albums = {
            str(ref): [cls._track_from_dict(track) for track in tracks or []]
            for ref, tracks in data.items()
        }
        logger.info(f"Loaded catalog with {len(albums)} albums from {path}")
        return cls(albums)

    @staticmethod
    def _track_from_dict(data: Dict[str, Any]) -> TrackInfo:
        return TrackInfo(
            track_ref=str(data["track_ref"]),
            name=data.get("name", ""),
            artist=data.get("artist", ""),
            duration_ms=data.get("duration_ms"),
            explicit=bool(data.get("explicit", False)),
        )

    def add_album(self, content_ref: str, tracks: Iterable[TrackInfo]) -> None:
        self._albums[content_ref] = list(tracks)

    async def list_tracks(self, content_ref: str) -> List[TrackInfo]:
        if content_ref not in self._albums:
            raise CatalogError(content_ref, "unknown album", component="StaticCatalog")
        return list(self._albums[content_ref])
