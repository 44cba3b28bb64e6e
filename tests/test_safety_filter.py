"""
Tests for the lexical safety filter.
"""

from dataclasses import dataclass

from guardian_moderation.algorithms.safety import (
    BLOCKED_QUERY_MESSAGE,
    EMPTY_QUERY_MESSAGE,
    MUSIC_TEXT_FIELDS,
    VIDEO_TEXT_FIELDS,
    SafetyFilter,
    WhitelistScope,
)
from guardian_moderation.core.config import SafetyConfig
from guardian_moderation.features.moderation import TrackInfo


class TestClassify:
    """Test keyword classification."""

    def test_blocks_keyword(self) -> None:
        match = SafetyFilter().classify("xxx videos")
        assert match is not None
        assert match.keyword == "xxx"

    def test_case_insensitive(self) -> None:
        match = SafetyFilter().classify("XXX Videos")
        assert match is not None
        assert match.keyword == "xxx"

    def test_inflections_match_prefix(self) -> None:
        match = SafetyFilter().classify("killing time")
        assert match is not None
        assert match.keyword == "kill"

    def test_keyword_inside_word_is_ignored(self) -> None:
        assert SafetyFilter().classify("skill tutorials") is None
        assert SafetyFilter().classify("scrapbook ideas") is None

    def test_first_keyword_in_list_order_wins(self) -> None:
        match = SafetyFilter().classify("naked sex")
        assert match is not None
        assert match.keyword == "sex"

    def test_empty_text_is_allowed(self) -> None:
        assert SafetyFilter().classify("") is None
        assert SafetyFilter().classify(None) is None

    def test_allowed_term_overrides_block(self) -> None:
        assert SafetyFilter().classify("Harry Potter and the Chamber of Secrets") is None
        assert SafetyFilter().classify("Assassin's Creed") is None

    def test_global_whitelist_clears_whole_string(self) -> None:
        safety_filter = SafetyFilter()
        assert safety_filter.whitelist_scope == WhitelistScope.GLOBAL
        assert safety_filter.classify("bluey gun fight") is None

    def test_scoped_whitelist_only_clears_overlapping_hits(self) -> None:
        safety_filter = SafetyFilter(whitelist_scope=WhitelistScope.SCOPED)
        match = safety_filter.classify("bluey gun fight")
        assert match is not None
        assert match.keyword == "gun"

    def test_scoped_whitelist_still_clears_phrase(self) -> None:
        safety_filter = SafetyFilter(whitelist_scope=WhitelistScope.SCOPED)
        assert safety_filter.classify("harry potter audiobook") is None

    def test_custom_word_lists(self) -> None:
        safety_filter = SafetyFilter(blocked_keywords=["dragon"], allowed_terms=[])
        match = safety_filter.classify("Dragons rule")
        assert match is not None
        assert match.keyword == "dragon"
        assert safety_filter.classify("xxx") is None

    def test_is_blocked(self) -> None:
        assert SafetyFilter().is_blocked("porn")
        assert not SafetyFilter().is_blocked("dinosaurs")

    def test_from_config(self) -> None:
        config = SafetyConfig(
            blocked_keywords=["spider"], allowed_terms=[], whitelist_scope="scoped"
        )
        safety_filter = SafetyFilter.from_config(config)
        assert safety_filter.whitelist_scope == WhitelistScope.SCOPED
        assert safety_filter.is_blocked("spiders everywhere")


class TestFilterResults:
    """Test result list filtering."""

    def test_drops_matching_and_age_restricted_videos(self) -> None:
        items = [
            {"title": "Bluey episodes", "channelTitle": "Bluey", "description": ""},
            {"title": "xxx", "channelTitle": "Somebody", "description": ""},
            {"title": "Fine", "channelTitle": "Ok", "ageRestricted": True},
            {"title": "Dinosaurs", "channelTitle": "Ok", "description": "gore"},
        ]
        kept = SafetyFilter().filter_results(items, VIDEO_TEXT_FIELDS)
        assert kept == [items[0]]

    def test_age_restricted_kept_when_disabled(self) -> None:
        items = [{"title": "Fine", "ageRestricted": True}]
        kept = SafetyFilter(block_age_restricted=False).filter_results(
            items, VIDEO_TEXT_FIELDS
        )
        assert kept == items

    def test_drops_explicit_music(self) -> None:
        items = [
            {"name": "Song", "artist": "A", "isExplicit": True},
            {"name": "Lullaby", "artist": "B", "contentRating": "explicit"},
            {"name": "Clean", "artist": "C"},
        ]
        kept = SafetyFilter().filter_results(items, MUSIC_TEXT_FIELDS)
        assert kept == [items[2]]

    def test_explicit_kept_when_disabled(self) -> None:
        items = [{"name": "Song", "artist": "A", "isExplicit": True}]
        kept = SafetyFilter(block_explicit=False).filter_results(items, MUSIC_TEXT_FIELDS)
        assert kept == items

    def test_accepts_objects(self) -> None:
        tracks = [
            TrackInfo("t1", "Rug Island", "Joff Bush"),
            TrackInfo("t2", "Radio Edit", "Someone", explicit=True),
            TrackInfo("t3", "Drunk Again", "Someone"),
        ]
        kept = SafetyFilter().filter_results(tracks, MUSIC_TEXT_FIELDS)
        assert [t.track_ref for t in kept] == ["t1"]

    def test_missing_fields_are_skipped(self) -> None:
        @dataclass
        class Item:
            title: str

        items = [Item("Dinosaurs")]
        assert SafetyFilter().filter_results(items, VIDEO_TEXT_FIELDS) == items

    def test_none_items(self) -> None:
        assert SafetyFilter().filter_results(None, VIDEO_TEXT_FIELDS) == []

    def test_preserves_order(self) -> None:
        items = [{"title": str(i)} for i in range(5)]
        assert SafetyFilter().filter_results(items, VIDEO_TEXT_FIELDS) == items


class TestValidateQuery:
    """Test search query validation."""

    def test_empty_query(self) -> None:
        for query in ("", "   ", None):
            result = SafetyFilter().validate_query(query)
            assert not result.valid
            assert result.message == EMPTY_QUERY_MESSAGE
            assert result.matched_keyword is None

    def test_blocked_query(self) -> None:
        result = SafetyFilter().validate_query("porn")
        assert not result.valid
        assert result.message == BLOCKED_QUERY_MESSAGE
        assert result.matched_keyword == "porn"

    def test_valid_query(self) -> None:
        result = SafetyFilter().validate_query("dinosaurs")
        assert result.valid
        assert result.matched_keyword is None
