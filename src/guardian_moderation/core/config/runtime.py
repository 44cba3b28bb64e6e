"""
Runtime configuration for the Guardian moderation engine.

Contains the moderation, safety, monitoring and storage configuration classes.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ...algorithms.safety.lexicon import DEFAULT_ALLOWED_TERMS, DEFAULT_BLOCKED_KEYWORDS


@dataclass
class ModerationConfig:
    """Request lifecycle, batch and undo configuration."""

    batch_undo_window_s: float = 30.0
    single_item_undo_window_s: float = 60.0
    single_item_undo_enabled: bool = True
    materialize_children_on_approve: bool = True
    dedupe_pending_requests: bool = True


@dataclass
class SafetyConfig:
    """Search safety filter configuration."""

    blocked_keywords: List[str] = field(
        default_factory=lambda: list(DEFAULT_BLOCKED_KEYWORDS)
    )
    allowed_terms: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_TERMS)
    )
    whitelist_scope: str = "global"  # global | scoped
    block_age_restricted: bool = True
    block_explicit: bool = True
    wordlist_file: Optional[Path] = None
    log_blocked_searches: bool = True


@dataclass
class MonitoringConfig:
    """Logging configuration."""

    log_level: str = "WARNING"
    structured_logging: bool = True


@dataclass
class StorageConfig:
    """Filesystem location of the JSON request store."""

    data_dir: Path = field(default_factory=lambda: Path.cwd() / "data/moderation")
