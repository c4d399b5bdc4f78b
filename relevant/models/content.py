"""Content view models.

ContentView is the canonical, UI-facing shape of a content record. It is
produced by relevant.services.normalizer and never built from raw API
payloads directly.
"""

from typing import Any

from pydantic import Field

from relevant.models.base import APIModel


class SourceChannel(APIModel):
    """Attribution of a content item to its channel/publisher."""

    id: str = ""
    name: str = "Unknown Channel"


class UserContentView(APIModel):
    """Per-user interaction overlay for one content item.

    Identity is (user_id, content_id); it is only ever reached nested
    inside a ContentView.
    """

    id: str = Field(default="unknown", alias="_id")
    user_id: str = ""
    content_id: str = ""
    relevance_score: float = 0.0
    matched_interests: list[str] = Field(default_factory=list)
    personalized_summary: str = ""
    personalized_highlights: list[str] = Field(default_factory=list)
    viewed: bool = False
    viewed_at: str | None = None
    liked: bool = False
    saved: bool = False
    dismissed: bool = False
    created_at: str = ""


class ContentView(APIModel):
    """Canonical display record for a video/article."""

    id: str = Field(default="unknown", alias="_id")
    title: str = "Untitled"
    description: str = ""
    url: str = "#"
    source: str = "unknown"
    source_id: str = ""
    source_channel: SourceChannel = Field(default_factory=SourceChannel)
    thumbnail: str = ""
    published_at: str = ""
    created_at: str = ""
    duration: float = 0
    tags: list[str] = Field(default_factory=list)
    category: str = "general"
    summary: str = ""
    highlights: list[str] = Field(default_factory=list)
    key_points: list[str] = Field(default_factory=list)
    relevant_topics: list[str] = Field(default_factory=list)
    processed: bool = True
    user_content: UserContentView | None = None

    @property
    def is_saved(self) -> bool:
        return bool(self.user_content and self.user_content.saved)

    @property
    def is_liked(self) -> bool:
        return bool(self.user_content and self.user_content.liked)

    @property
    def is_viewed(self) -> bool:
        return bool(self.user_content and self.user_content.viewed)

    @property
    def is_dismissed(self) -> bool:
        return bool(self.user_content and self.user_content.dismissed)


class Pagination(APIModel):
    """Paging block returned by list endpoints."""

    current_page: int = 1
    total_items: int = 0
    has_more: bool = False


class ContentPage(APIModel):
    """One page of normalized content."""

    items: list[ContentView] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
    query: str | None = None

    @property
    def ids(self) -> list[str]:
        return [item.id for item in self.items]


class ProcessingStatus(APIModel):
    """Background processing queue status."""

    active_jobs: int = 0
    queued_jobs: int = 0
    last_update: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.active_jobs > 0 or self.queued_jobs > 0


class YouTubeConnectionStatus(APIModel):
    """Response of /api/youtube/status."""

    connected: bool = False
    channel_id: str | None = None
    channel_title: str | None = None


class ActionResult(APIModel):
    """Generic ``{success, msg}`` response."""

    success: bool = True
    msg: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "SourceChannel",
    "UserContentView",
    "ContentView",
    "Pagination",
    "ContentPage",
    "ProcessingStatus",
    "YouTubeConnectionStatus",
    "ActionResult",
]
