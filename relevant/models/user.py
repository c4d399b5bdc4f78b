"""User, preference, interest and YouTube source DTOs.

Interests arrive in two shapes depending on backend revision: a flat
list of strings or a category -> subcategory -> keyword tree. The tree is
the canonical shape here; flat lists are lifted into it on load.
"""

from typing import Any, Literal

from pydantic import Field, RootModel, field_validator

from relevant.models.base import APIModel

FeedFrequency = Literal["daily", "weekly", "realtime"]

DEFAULT_INTEREST_PRIORITY = 5


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


# ============================================
# Interests
# ============================================


class InterestSubcategory(APIModel):
    """Subcategory with its own priority and keywords."""

    priority: int = Field(default=DEFAULT_INTEREST_PRIORITY, ge=1, le=10)
    keywords: list[str] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def keep_strings(cls, v: Any) -> list[str]:
        return _string_list(v)


class InterestCategory(APIModel):
    """Top-level interest category."""

    priority: int = Field(default=DEFAULT_INTEREST_PRIORITY, ge=1, le=10)
    keywords: list[str] = Field(default_factory=list)
    subcategories: dict[str, InterestSubcategory] = Field(default_factory=dict)

    @field_validator("keywords", mode="before")
    @classmethod
    def keep_strings(cls, v: Any) -> list[str]:
        return _string_list(v)

    @field_validator("subcategories", mode="before")
    @classmethod
    def lift_subcategories(cls, v: Any) -> dict[str, Any]:
        """Accept ``{name: [keywords]}`` as well as ``{name: {priority, keywords}}``."""
        if not isinstance(v, dict):
            return {}
        lifted: dict[str, Any] = {}
        for name, sub in v.items():
            if isinstance(sub, list):
                lifted[name] = {"keywords": sub}
            elif isinstance(sub, dict):
                lifted[name] = sub
        return lifted


class Interests(RootModel[dict[str, InterestCategory]]):
    """Hierarchical interests keyed by category name."""

    root: dict[str, InterestCategory] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, value: Any) -> "Interests":
        """Build interests from either known API shape.

        Args:
            value: Flat ``list[str]`` or hierarchical mapping

        Returns:
            Canonical hierarchical interests (empty for anything else)
        """
        if isinstance(value, list):
            return cls({name: InterestCategory() for name in _string_list(value)})
        if isinstance(value, dict):
            return cls(
                {
                    name: InterestCategory.model_validate(body)
                    for name, body in value.items()
                    if isinstance(body, dict)
                }
            )
        return cls({})

    @property
    def categories(self) -> list[str]:
        """Category names ordered by descending priority."""
        return sorted(self.root, key=lambda name: (-self.root[name].priority, name))

    def keywords(self) -> list[str]:
        """Every keyword in the tree, de-duplicated, in category priority order."""
        seen: dict[str, None] = {}
        for name in self.categories:
            category = self.root[name]
            for keyword in category.keywords:
                seen.setdefault(keyword, None)
            for sub in category.subcategories.values():
                for keyword in sub.keywords:
                    seen.setdefault(keyword, None)
        return list(seen)

    def __len__(self) -> int:
        return len(self.root)

    def __contains__(self, category: object) -> bool:
        return category in self.root


class InterestCategoryForm(APIModel):
    """Payload for adding a single interest category."""

    category: str = Field(min_length=1)
    priority: int = Field(default=DEFAULT_INTEREST_PRIORITY, ge=1, le=10)
    keywords: list[str] = Field(default_factory=list)


# ============================================
# YouTube
# ============================================


class YouTubeSource(APIModel):
    """A channel the user follows."""

    channel_id: str
    channel_title: str
    channel_url: str | None = None
    added_at: str | None = None


class YouTubeChannelForm(APIModel):
    """Payload for following a channel."""

    channel_id: str = Field(min_length=1)
    channel_title: str = Field(min_length=1)
    channel_url: str | None = None


class YouTubeConnection(APIModel):
    """The user's authenticated YouTube account (OAuth), not a followed channel."""

    connected: bool = False
    channel_id: str | None = None
    channel_title: str | None = None
    connected_at: str | None = None
    last_sync_at: str | None = None


# ============================================
# Preferences & User
# ============================================


class UserPreferences(APIModel):
    """Feed and notification preferences."""

    email_notifications: bool = True
    content_language: str = "en"
    feed_frequency: FeedFrequency = "daily"
    content_frequency: FeedFrequency | None = None
    max_content_per_day: int | None = None
    relevance_threshold: float | None = None


class PreferencesForm(APIModel):
    """Payload for /api/user/preferences."""

    email_notifications: bool = True
    content_language: str = "en"
    feed_frequency: FeedFrequency = "daily"


class User(APIModel):
    """Authenticated user profile."""

    id: str = Field(alias="_id")
    email: str
    name: str = ""
    interests: Interests = Field(default_factory=Interests)
    youtube_sources: list[YouTubeSource] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    last_active: str | None = None
    created_at: str | None = None
    youtube_connection: YouTubeConnection | None = None

    @field_validator("interests", mode="before")
    @classmethod
    def coerce_interests(cls, v: Any) -> Interests:
        if isinstance(v, Interests):
            return v
        return Interests.from_payload(v)

    @field_validator("preferences", mode="before")
    @classmethod
    def default_preferences(cls, v: Any) -> Any:
        return v if v is not None else {}


class UserStats(APIModel):
    """Response of /api/user/stats."""

    total_interests: int = 0
    total_youtube_sources: int = 0
    member_since: str | None = None
    last_active: str | None = None


__all__ = [
    "InterestSubcategory",
    "InterestCategory",
    "Interests",
    "InterestCategoryForm",
    "YouTubeSource",
    "YouTubeChannelForm",
    "YouTubeConnection",
    "UserPreferences",
    "PreferencesForm",
    "User",
    "UserStats",
]
