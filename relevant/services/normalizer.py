"""Content view-model normalization.

The content API has renamed fields across backend revisions. This module
turns any of those payloads into a ContentView:

1. Shape detection (canonical / legacy_video / generic) for diagnostics
2. Field resolution from a fixed, per-field candidate order
3. Terminal fallbacks so normalization never fails

Resolution follows "first truthy candidate wins": empty strings, zero,
None and empty containers fall through to the next candidate.
"""

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal

from relevant.core.exceptions import ContentDecodeError
from relevant.core.logging import get_logger
from relevant.models.content import ContentView, SourceChannel, UserContentView

logger = get_logger(__name__)

ContentShape = Literal["canonical", "legacy_video", "generic"]

UNKNOWN_ID = "unknown"

# Candidate keys per canonical field, tried in order.
CONTENT_FIELD_ORDER: dict[str, tuple[str, ...]] = {
    "id": ("_id", "id", "contentId", "videoId"),
    "title": ("title", "name", "description"),
    "description": ("description", "summary", "personalizedSummary"),
    "url": ("url", "link", "videoUrl"),
    "source": ("source",),
    "source_id": ("sourceId", "channelId"),
    "thumbnail": ("thumbnail", "thumbnailUrl", "image"),
    "category": ("category",),
}

CONTENT_FALLBACKS: dict[str, str] = {
    "id": UNKNOWN_ID,
    "title": "Untitled",
    "description": "",
    "url": "#",
    "source": "unknown",
    "source_id": "",
    "thumbnail": "",
    "category": "general",
}

CHANNEL_NAME_ORDER = ("channelName", "channelTitle")
UNKNOWN_CHANNEL = "Unknown Channel"

STRING_LIST_FIELDS: dict[str, str] = {
    "tags": "tags",
    "highlights": "highlights",
    "key_points": "keyPoints",
    "relevant_topics": "relevantTopics",
}


# ============================================
# Primitive coercions
# ============================================


def _text(value: Any) -> str | None:
    """Return value as non-empty text, or None when it should fall through."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, int | float) and value and not (
        isinstance(value, float) and math.isnan(value)
    ):
        return str(value)
    return None


def _first_text(payload: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        text = _text(payload.get(key))
        if text is not None:
            return text
    return None


def _number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int | float):
        return value if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return 0
        return parsed if math.isfinite(parsed) else 0
    return 0


def _string_list(value: Any) -> list[str]:
    """Arrays keep their string items; anything else becomes empty."""
    if not isinstance(value, list | tuple):
        return []
    return [item for item in value if isinstance(item, str)]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


# ============================================
# Shape detection
# ============================================


def detect_shape(payload: Mapping[str, Any]) -> ContentShape:
    """Classify a content payload by the backend revision that produced it.

    Args:
        payload: Raw content mapping

    Returns:
        "canonical" for ``_id`` + ``sourceChannel`` records,
        "legacy_video" for ``videoId``/``channelTitle`` records,
        "generic" otherwise
    """
    if "_id" in payload and isinstance(payload.get("sourceChannel"), Mapping):
        return "canonical"
    if "videoId" in payload or "channelTitle" in payload:
        return "legacy_video"
    return "generic"


# ============================================
# Decoders
# ============================================


def normalize_user_content(
    payload: Any,
    parent: Mapping[str, Any],
    content_id: str,
    now: str,
) -> UserContentView | None:
    """Decode the nested interaction record, or None when absent.

    Args:
        payload: Raw ``userContent`` value
        parent: The enclosing content payload
        content_id: Resolved id of the enclosing content
        now: Timestamp used for a missing ``createdAt``
    """
    if not isinstance(payload, Mapping) or not payload:
        return None

    return UserContentView(
        id=_text(payload.get("_id")) or UNKNOWN_ID,
        user_id=_text(payload.get("userId")) or "",
        content_id=(
            _text(payload.get("contentId"))
            or _first_text(parent, ("_id", "id"))
            or content_id
        ),
        relevance_score=_number(payload.get("relevanceScore")),
        matched_interests=_string_list(payload.get("matchedInterests")),
        personalized_summary=_text(payload.get("personalizedSummary")) or "",
        personalized_highlights=_string_list(payload.get("personalizedHighlights")),
        viewed=bool(payload.get("viewed")),
        viewed_at=_text(payload.get("viewedAt")),
        liked=bool(payload.get("liked")),
        saved=bool(payload.get("saved")),
        dismissed=bool(payload.get("dismissed")),
        created_at=_text(payload.get("createdAt")) or now,
    )


def _source_channel(payload: Mapping[str, Any]) -> SourceChannel:
    channel = payload.get("sourceChannel")
    fallback_id = _text(payload.get("channelId")) or ""
    fallback_name = _first_text(payload, CHANNEL_NAME_ORDER) or UNKNOWN_CHANNEL
    if isinstance(channel, Mapping) and channel:
        return SourceChannel(
            id=_text(channel.get("id")) or fallback_id,
            name=_text(channel.get("name")) or fallback_name,
        )
    return SourceChannel(id=fallback_id, name=fallback_name)


def _decode(payload: Mapping[str, Any], now: str | None) -> ContentView:
    timestamp = now or _now_iso()
    fallbacks: list[str] = []

    resolved: dict[str, str] = {}
    for field, keys in CONTENT_FIELD_ORDER.items():
        value = _first_text(payload, keys)
        if value is None:
            value = CONTENT_FALLBACKS[field]
            fallbacks.append(field)
        resolved[field] = value

    lists = {field: _string_list(payload.get(key)) for field, key in STRING_LIST_FIELDS.items()}
    processed = payload.get("processed")

    view = ContentView(
        **resolved,
        source_channel=_source_channel(payload),
        published_at=_first_text(payload, ("publishedAt", "createdAt")) or timestamp,
        created_at=_text(payload.get("createdAt")) or timestamp,
        duration=_number(payload.get("duration")),
        summary=_text(payload.get("summary")) or resolved["description"],
        processed=True if processed is None else bool(processed),
        user_content=normalize_user_content(
            payload.get("userContent"), payload, resolved["id"], timestamp
        ),
        **lists,
    )

    if fallbacks:
        logger.debug(
            "Content fields fell back",
            content_id=view.id,
            shape=detect_shape(payload),
            fallbacks=fallbacks,
        )
    return view


def decode_content(payload: Any, now: str | None = None) -> ContentView:
    """Strict decoder: rejects payloads that are not mappings.

    Args:
        payload: Raw content payload
        now: ISO timestamp for missing dates (default: current UTC time)

    Returns:
        Normalized ContentView

    Raises:
        ContentDecodeError: If payload is not a mapping
    """
    if not isinstance(payload, Mapping):
        raise ContentDecodeError(
            "Content payload must be an object",
            payload_type=type(payload).__name__,
        )
    return _decode(payload, now)


def normalize_content(payload: Any, now: str | None = None) -> ContentView:
    """Lenient decoder: total over every input.

    Malformed data is masked by the fallbacks, never raised. A payload that
    is not a mapping normalizes like an empty record.

    Args:
        payload: Raw content payload (any type)
        now: ISO timestamp for missing dates (default: current UTC time)

    Returns:
        Normalized ContentView
    """
    if not isinstance(payload, Mapping):
        payload = {}
    return _decode(payload, now)


def normalize_content_list(value: Any, now: str | None = None) -> list[ContentView]:
    """Normalize a list of content payloads.

    Non-mapping entries are dropped; a non-list value yields an empty list.
    """
    if not isinstance(value, list):
        if value is not None:
            logger.warning("Content list is not an array", value_type=type(value).__name__)
        return []

    timestamp = now or _now_iso()
    views: list[ContentView] = []
    for index, item in enumerate(value):
        if not isinstance(item, Mapping):
            logger.warning(
                "Dropping non-object content item",
                index=index,
                item_type=type(item).__name__,
            )
            continue
        views.append(_decode(item, timestamp))
    return views


__all__ = [
    "ContentShape",
    "CONTENT_FIELD_ORDER",
    "CONTENT_FALLBACKS",
    "UNKNOWN_ID",
    "detect_shape",
    "decode_content",
    "normalize_content",
    "normalize_content_list",
    "normalize_user_content",
]
