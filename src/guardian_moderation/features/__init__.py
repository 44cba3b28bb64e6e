"""
Features package for the Guardian moderation engine.

Contains the content request moderation feature built on top of the core
stores, configuration and the safety filter.
"""

from .moderation import ModerationEngine, create_moderation_engine

__all__ = [
    "ModerationEngine",
    "create_moderation_engine",
]
