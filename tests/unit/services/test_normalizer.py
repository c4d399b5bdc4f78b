"""Unit tests for content normalization.

Tests cover:
- Terminal fallbacks for empty and malformed payloads
- Candidate order per field across backend revisions
- Nested interaction records
- Strict vs lenient decoding
"""

import math

import pytest

from relevant.core.exceptions import ContentDecodeError
from relevant.services.normalizer import (
    decode_content,
    detect_shape,
    normalize_content,
    normalize_content_list,
    normalize_user_content,
)

NOW = "2024-05-01T12:00:00+00:00"


class TestFallbacks:
    """Tests for empty and malformed payloads."""

    def test_empty_payload(self):
        view = normalize_content({}, now=NOW)

        assert view.id == "unknown"
        assert view.title == "Untitled"
        assert view.url == "#"
        assert view.source == "unknown"
        assert view.category == "general"
        assert view.source_channel.name == "Unknown Channel"
        assert view.published_at == NOW
        assert view.created_at == NOW
        assert view.duration == 0
        assert view.processed is True
        assert view.highlights == []
        assert view.user_content is None

    @pytest.mark.parametrize("payload", [None, [], "text", 42])
    def test_non_mapping_normalizes_like_empty(self, payload):
        assert normalize_content(payload, now=NOW) == normalize_content({}, now=NOW)

    @pytest.mark.parametrize("highlights", [None, "one", 3, {"a": 1}])
    def test_highlights_not_a_list(self, highlights):
        view = normalize_content({"_id": "c1", "highlights": highlights}, now=NOW)
        assert view.highlights == []

    def test_list_keeps_only_strings(self):
        view = normalize_content({"tags": ["a", None, 2, "b"]}, now=NOW)
        assert view.tags == ["a", "b"]

    @pytest.mark.parametrize("duration", ["abc", None, math.nan, math.inf, True])
    def test_bad_duration(self, duration):
        assert normalize_content({"duration": duration}, now=NOW).duration == 0

    def test_numeric_string_duration(self):
        assert normalize_content({"duration": "90"}, now=NOW).duration == 90

    def test_processed_false_is_kept(self):
        assert normalize_content({"processed": False}, now=NOW).processed is False


class TestCandidateOrder:
    """Tests for field resolution across payload shapes."""

    def test_legacy_video_payload(self):
        view = normalize_content(
            {
                "videoId": "v9",
                "name": "Legacy title",
                "videoUrl": "https://youtube.com/watch?v=v9",
                "channelId": "ch9",
                "channelTitle": "Old Channel",
                "thumbnailUrl": "https://img/9.jpg",
            },
            now=NOW,
        )

        assert view.id == "v9"
        assert view.title == "Legacy title"
        assert view.url == "https://youtube.com/watch?v=v9"
        assert view.source_id == "ch9"
        assert view.source_channel.id == "ch9"
        assert view.source_channel.name == "Old Channel"
        assert view.thumbnail == "https://img/9.jpg"

    def test_empty_string_falls_through(self):
        view = normalize_content({"_id": "", "id": "c2", "title": "", "name": "Named"}, now=NOW)
        assert view.id == "c2"
        assert view.title == "Named"

    def test_title_falls_back_to_description(self):
        view = normalize_content({"description": "Only a description"}, now=NOW)
        assert view.title == "Only a description"

    def test_description_and_summary_fallbacks(self):
        view = normalize_content({"personalizedSummary": "For you"}, now=NOW)
        assert view.description == "For you"
        assert view.summary == "For you"

    def test_published_at_falls_back_to_created_at(self):
        view = normalize_content({"createdAt": "2024-01-02T00:00:00Z"}, now=NOW)
        assert view.published_at == "2024-01-02T00:00:00Z"

    def test_numeric_id_becomes_text(self):
        assert normalize_content({"id": 17}, now=NOW).id == "17"

    def test_channel_mapping_with_gaps(self):
        view = normalize_content(
            {"sourceChannel": {"id": "", "name": "Named"}, "channelId": "ch3"}, now=NOW
        )
        assert view.source_channel.id == "ch3"
        assert view.source_channel.name == "Named"


class TestUserContent:
    """Tests for the nested interaction record."""

    def test_absent_or_empty(self):
        assert normalize_user_content(None, {}, "c1", NOW) is None
        assert normalize_user_content({}, {}, "c1", NOW) is None

    def test_content_id_falls_back_to_parent(self):
        record = normalize_user_content({"saved": True}, {"_id": "parent"}, "c1", NOW)

        assert record.content_id == "parent"
        assert record.saved is True
        assert record.created_at == NOW
        assert record.id == "unknown"

    def test_content_id_falls_back_to_resolved_id(self):
        record = normalize_user_content({"liked": 1}, {}, "c1", NOW)
        assert record.content_id == "c1"
        assert record.liked is True

    def test_overlay_in_content(self):
        view = normalize_content(
            {"_id": "c1", "userContent": {"saved": True, "relevanceScore": "0.75"}}, now=NOW
        )
        assert view.is_saved is True
        assert view.user_content.relevance_score == 0.75


class TestDecoders:
    """Tests for strict, lenient and list decoding."""

    def test_decode_rejects_non_mapping(self):
        with pytest.raises(ContentDecodeError) as exc_info:
            decode_content([])
        assert exc_info.value.context["payload_type"] == "list"

    def test_decode_accepts_mapping(self):
        assert decode_content({"_id": "c1"}, now=NOW).id == "c1"

    def test_normalization_is_idempotent(self):
        first = normalize_content(
            {
                "videoId": "v1",
                "description": "Desc",
                "channelTitle": "Chan",
                "duration": "65",
                "userContent": {"liked": True},
            },
            now=NOW,
        )
        assert normalize_content(first.to_payload(), now=NOW) == first

    def test_list_drops_non_mappings(self):
        views = normalize_content_list([{"_id": "a"}, None, "x", {"_id": "b"}], now=NOW)
        assert [v.id for v in views] == ["a", "b"]

    @pytest.mark.parametrize("value", [None, {"_id": "a"}, "list"])
    def test_list_non_array(self, value):
        assert normalize_content_list(value) == []


class TestDetectShape:
    """Tests for payload shape classification."""

    def test_canonical(self):
        assert detect_shape({"_id": "c1", "sourceChannel": {"id": "x"}}) == "canonical"

    def test_legacy_video(self):
        assert detect_shape({"videoId": "v1"}) == "legacy_video"
        assert detect_shape({"channelTitle": "Chan"}) == "legacy_video"

    def test_generic(self):
        assert detect_shape({"id": "c1"}) == "generic"
