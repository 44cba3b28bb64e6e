"""
Persistence utilities for the Guardian moderation engine.

Provides JSON persistence helpers and the bundled Request Store and
blocked-search log implementations.
"""

from .base_manager import BaseDataManager
from .json_manager import JSONRepository
from .json_store import JSONBlockedSearchLog, JSONRequestStore
from .memory_store import InMemoryBlockedSearchLog, InMemoryRequestStore

__all__ = [
    "BaseDataManager",
    "JSONRepository",
    "InMemoryRequestStore",
    "InMemoryBlockedSearchLog",
    "JSONRequestStore",
    "JSONBlockedSearchLog",
]
