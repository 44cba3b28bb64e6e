"""
Lexical safety filtering for kid-facing search.
"""

from .classifier import (
    BLOCKED_QUERY_MESSAGE,
    CHANNEL_TEXT_FIELDS,
    EMPTY_QUERY_MESSAGE,
    MUSIC_TEXT_FIELDS,
    VIDEO_TEXT_FIELDS,
    MatchResult,
    QueryValidation,
    SafetyFilter,
    WhitelistScope,
)
from .lexicon import DEFAULT_ALLOWED_TERMS, DEFAULT_BLOCKED_KEYWORDS

__all__ = [
    "SafetyFilter",
    "MatchResult",
    "QueryValidation",
    "WhitelistScope",
    "DEFAULT_ALLOWED_TERMS",
    "DEFAULT_BLOCKED_KEYWORDS",
    "VIDEO_TEXT_FIELDS",
    "CHANNEL_TEXT_FIELDS",
    "MUSIC_TEXT_FIELDS",
    "EMPTY_QUERY_MESSAGE",
    "BLOCKED_QUERY_MESSAGE",
]
