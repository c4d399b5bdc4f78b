"""Query identities and mutation invalidation sets.

A query key is a tuple ``(name, *params)``. Invalidation works on
prefixes, so ``("contentFeed",)`` covers every page and filter of the feed.
"""

from collections.abc import Hashable, Mapping
from typing import Any

QueryKey = tuple[Hashable, ...]

CONTENT_FEED = "contentFeed"
SEARCH_CONTENT = "searchContent"
SAVED_CONTENT = "savedContent"
PERSONALIZED_FEED = "personalizedFeed"
CONTENT_DETAIL = "content"
USER_PROFILE = "userProfile"
USER_STATS = "userStats"
YOUTUBE_STATUS = "youtubeStatus"
PROCESSING_STATUS = "processingStatus"


def freeze(value: Any) -> Hashable:
    """Turn a query parameter into a hashable, order-stable value."""
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(freeze(v) for v in value))
    return value


def query_key(name: str, *params: Any) -> QueryKey:
    """Build a key for ``name`` with frozen params.

    Example:
        >>> query_key("contentFeed", {"page": 1, "limit": 10})
        ('contentFeed', (('limit', 10), ('page', 1)))
    """
    return (name, *(freeze(p) for p in params))


def as_key(key: QueryKey | list | str) -> QueryKey:
    if isinstance(key, str):
        return (key,)
    return tuple(freeze(part) for part in key)


def matches(key: QueryKey, prefix: QueryKey) -> bool:
    """True if key starts with prefix."""
    return key[: len(prefix)] == prefix


# ============================================
# Invalidation sets per mutation
# ============================================

CONTENT_LISTS: tuple[QueryKey, ...] = (
    (CONTENT_FEED,),
    (SEARCH_CONTENT,),
    (SAVED_CONTENT,),
    (PERSONALIZED_FEED,),
)

LIKE_INVALIDATES: tuple[QueryKey, ...] = (*CONTENT_LISTS, (CONTENT_DETAIL,))
SAVE_INVALIDATES: tuple[QueryKey, ...] = (*CONTENT_LISTS, (CONTENT_DETAIL,))
# Dismissing hides an item from feeds; the saved list is left untouched.
DISMISS_INVALIDATES: tuple[QueryKey, ...] = (
    (CONTENT_FEED,),
    (SEARCH_CONTENT,),
    (PERSONALIZED_FEED,),
    (CONTENT_DETAIL,),
)
VIEW_INVALIDATES: tuple[QueryKey, ...] = (
    (CONTENT_FEED,),
    (SAVED_CONTENT,),
    (PERSONALIZED_FEED,),
    (CONTENT_DETAIL,),
)
PROFILE_INVALIDATES: tuple[QueryKey, ...] = ((USER_PROFILE,), (USER_STATS,))
YOUTUBE_INVALIDATES: tuple[QueryKey, ...] = ((USER_PROFILE,), (YOUTUBE_STATUS,))
PROCESSING_INVALIDATES: tuple[QueryKey, ...] = ((PROCESSING_STATUS,),)


__all__ = [
    "QueryKey",
    "CONTENT_FEED",
    "SEARCH_CONTENT",
    "SAVED_CONTENT",
    "PERSONALIZED_FEED",
    "CONTENT_DETAIL",
    "USER_PROFILE",
    "USER_STATS",
    "YOUTUBE_STATUS",
    "PROCESSING_STATUS",
    "LIKE_INVALIDATES",
    "SAVE_INVALIDATES",
    "DISMISS_INVALIDATES",
    "VIEW_INVALIDATES",
    "PROFILE_INVALIDATES",
    "YOUTUBE_INVALIDATES",
    "PROCESSING_INVALIDATES",
    "freeze",
    "query_key",
    "as_key",
    "matches",
]
