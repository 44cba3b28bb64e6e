"""
Lexical safety filter for search queries and result lists.

Deterministic keyword matcher with an allow-list override. It gates what a
kid can type into search and what catalog results reach them; it does not
attempt any semantic understanding of the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Iterable,
    List,
    Mapping,
    Optional,
    Pattern,
    Sequence,
    Tuple,
)

from ...core.logging import get_logger
from .lexicon import DEFAULT_ALLOWED_TERMS, DEFAULT_BLOCKED_KEYWORDS

if TYPE_CHECKING:
    from ...core.config.runtime import SafetyConfig

logger = get_logger(__name__)

EMPTY_QUERY_MESSAGE = "Please enter a search term"
BLOCKED_QUERY_MESSAGE = (
    "This search contains inappropriate content. Please search for something else."
)

# Text fields checked per catalog item shape
VIDEO_TEXT_FIELDS: Tuple[str, ...] = ("title", "channelTitle", "description")
CHANNEL_TEXT_FIELDS: Tuple[str, ...] = ("channelTitle", "description")
MUSIC_TEXT_FIELDS: Tuple[str, ...] = ("name", "artist")

_AGE_RESTRICTED_KEYS = ("ageRestricted", "age_restricted")
_EXPLICIT_FLAG_KEYS = ("isExplicit", "is_explicit", "explicit")


class WhitelistScope(Enum):
    """How far an allow-listed phrase suppresses keyword matches."""

    GLOBAL = "global"  # Any allowed phrase anywhere clears the whole string
    SCOPED = "scoped"  # Only matches overlapping an allowed phrase are cleared


@dataclass(frozen=True)
class MatchResult:
    """The blocklist keyword that caused a string to be refused."""

    keyword: str


@dataclass(frozen=True)
class QueryValidation:
    """Outcome of validating a kid's search query."""

    valid: bool
    message: str = ""
    matched_keyword: Optional[str] = None


def _field_value(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


class SafetyFilter:
    """Blocklist/allow-list text classifier."""

    def __init__(
        self,
        blocked_keywords: Optional[Sequence[str]] = None,
        allowed_terms: Optional[Sequence[str]] = None,
        whitelist_scope: WhitelistScope = WhitelistScope.GLOBAL,
        block_age_restricted: bool = True,
        block_explicit: bool = True,
    ):
        keywords = (
            DEFAULT_BLOCKED_KEYWORDS if blocked_keywords is None else blocked_keywords
        )
        allowed = DEFAULT_ALLOWED_TERMS if allowed_terms is None else allowed_terms

        self.blocked_keywords: Tuple[str, ...] = tuple(
            k.strip().lower() for k in keywords if k and k.strip()
        )
        self.allowed_terms: Tuple[str, ...] = tuple(
            t.strip().lower() for t in allowed if t and t.strip()
        )
        self.whitelist_scope = WhitelistScope(whitelist_scope)
        self.block_age_restricted = block_age_restricted
        self.block_explicit = block_explicit

        # Word-boundary anchored, trailing word characters catch inflections
        self._patterns: List[Tuple[str, Pattern[str]]] = [
            (keyword, re.compile(rf"\b{re.escape(keyword)}\w*\b", re.IGNORECASE))
            for keyword in self.blocked_keywords
        ]

    @classmethod
    def from_config(cls, config: "SafetyConfig") -> "SafetyFilter":
        """Build a filter from the safety configuration section."""
        return cls(
            blocked_keywords=config.blocked_keywords,
            allowed_terms=config.allowed_terms,
            whitelist_scope=WhitelistScope(config.whitelist_scope),
            block_age_restricted=config.block_age_restricted,
            block_explicit=config.block_explicit,
        )

    def classify(self, text: Optional[str]) -> Optional[MatchResult]:
        """Return the first blocklist keyword found in ``text``, or None."""
        if not text:
            return None

        lowered = str(text).lower()

        if self.whitelist_scope == WhitelistScope.GLOBAL:
            for allowed in self.allowed_terms:
                if allowed in lowered:
                    return None
            for keyword, pattern in self._patterns:
                if pattern.search(lowered):
                    logger.debug("Blocked text", keyword=keyword)
                    return MatchResult(keyword=keyword)
            return None

        allowed_spans = self._allowed_spans(lowered)
        for keyword, pattern in self._patterns:
            for match in pattern.finditer(lowered):
                if not self._overlaps(match.span(), allowed_spans):
                    logger.debug("Blocked text", keyword=keyword)
                    return MatchResult(keyword=keyword)
        return None

    def is_blocked(self, text: Optional[str]) -> bool:
        return self.classify(text) is not None

    def filter_results(
        self, items: Optional[Iterable[Any]], text_fields: Sequence[str]
    ) -> List[Any]:
        """Drop items whose text fields match, or which carry a restriction flag."""
        if items is None:
            return []

        kept = []
        dropped = 0
        for item in items:
            if self._should_drop(item, text_fields):
                dropped += 1
            else:
                kept.append(item)

        if dropped:
            logger.info(
                "Filtered result batch", dropped=dropped, kept=len(kept)
            )
        return kept

    def validate_query(self, query: Optional[str]) -> QueryValidation:
        """Validate a search query before it is sent to a catalog."""
        if not query or not str(query).strip():
            return QueryValidation(valid=False, message=EMPTY_QUERY_MESSAGE)

        result = self.classify(query)
        if result:
            return QueryValidation(
                valid=False,
                message=BLOCKED_QUERY_MESSAGE,
                matched_keyword=result.keyword,
            )

        return QueryValidation(valid=True)

    def _should_drop(self, item: Any, text_fields: Sequence[str]) -> bool:
        for name in text_fields:
            value = _field_value(item, name)
            if isinstance(value, str) and self.classify(value):
                return True

        if self.block_age_restricted and any(
            _field_value(item, key) for key in _AGE_RESTRICTED_KEYS
        ):
            return True

        if self.block_explicit:
            if _field_value(item, "contentRating") == "explicit":
                return True
            if any(_field_value(item, key) is True for key in _EXPLICIT_FLAG_KEYS):
                return True

        return False

    def _allowed_spans(self, lowered: str) -> List[Tuple[int, int]]:
        spans = []
        for allowed in self.allowed_terms:
            start = lowered.find(allowed)
            while start != -1:
                spans.append((start, start + len(allowed)))
                start = lowered.find(allowed, start + 1)
        return spans

    @staticmethod
    def _overlaps(span: Tuple[int, int], allowed_spans: List[Tuple[int, int]]) -> bool:
        start, end = span
        return any(start < a_end and a_start < end for a_start, a_end in allowed_spans)
