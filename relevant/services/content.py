"""Content reads and interactions.

Reads go through the QueryClient under the content query names; every
interaction is a Mutation that invalidates the lists it can change.
"""

from relevant.config.query import PageQueryOptions, QueryOptions
from relevant.core.logging import get_logger
from relevant.infrastructure.api_client import RelevantAPI
from relevant.models.content import ContentPage, ContentView, UserContentView
from relevant.services.query.client import Mutation, QueryClient
from relevant.services.query.keys import (
    CONTENT_DETAIL,
    CONTENT_FEED,
    DISMISS_INVALIDATES,
    LIKE_INVALIDATES,
    PERSONALIZED_FEED,
    SAVE_INVALIDATES,
    SAVED_CONTENT,
    SEARCH_CONTENT,
    VIEW_INVALIDATES,
    query_key,
)
from relevant.services.query.pagination import FeedAccumulator

logger = get_logger(__name__)


class ContentService:
    """Feed, saved list, search and per-item interactions.

    Example:
        >>> content = ContentService(api, query_client)
        >>> page = await content.feed(page=1)
        >>> await content.save(page.items[0].id, True)
    """

    def __init__(
        self,
        api: RelevantAPI,
        queries: QueryClient,
        options: QueryOptions | None = None,
        scroll_threshold_px: int = 1000,
    ) -> None:
        """Initialize content service.

        Args:
            api: Relevant API client
            queries: Shared query cache
            options: Per-page sizes, relevance floors and stale times
            scroll_threshold_px: Infinite-scroll trigger distance
        """
        self.api = api
        self.queries = queries
        self.options = options or QueryOptions()
        self.scroll_threshold_px = scroll_threshold_px

    # ============================================
    # Reads
    # ============================================

    async def _feed(
        self, name: str, opts: PageQueryOptions, page: int, limit: int | None
    ) -> ContentPage:
        params = {
            "page": page,
            "limit": limit or opts.page_size,
            "minRelevance": opts.min_relevance,
        }
        return await self.queries.fetch(
            query_key(name, params),
            lambda: self.api.get_content_feed(
                page=params["page"], limit=params["limit"], min_relevance=opts.min_relevance
            ),
            stale_time=opts.stale_time,
        )

    async def feed(self, page: int = 1, limit: int | None = None) -> ContentPage:
        """Main relevance-filtered feed."""
        return await self._feed(CONTENT_FEED, self.options.feed, page, limit)

    async def discover(self, page: int = 1, limit: int | None = None) -> ContentPage:
        """Wider, lower-threshold feed for the discover page."""
        return await self._feed(CONTENT_FEED, self.options.discover, page, limit)

    async def personalized(self, page: int = 1, limit: int | None = None) -> ContentPage:
        """Home shelf of the most relevant items."""
        return await self._feed(PERSONALIZED_FEED, self.options.home, page, limit)

    async def saved(self, page: int = 1, limit: int | None = None) -> ContentPage:
        opts = self.options.saved
        params = {"page": page, "limit": limit or opts.page_size}
        return await self.queries.fetch(
            query_key(SAVED_CONTENT, params),
            lambda: self.api.get_saved_content(page=params["page"], limit=params["limit"]),
            stale_time=opts.stale_time,
        )

    async def search(self, query: str, page: int = 1, limit: int | None = None) -> ContentPage:
        """Search content; a blank query returns an empty page without a request."""
        query = query.strip()
        if not query:
            return ContentPage(query="")

        opts = self.options.search
        params = {"q": query, "page": page, "limit": limit or opts.page_size}
        return await self.queries.fetch(
            query_key(SEARCH_CONTENT, params),
            lambda: self.api.search_content(query, page=params["page"], limit=params["limit"]),
            stale_time=opts.stale_time,
        )

    async def get(self, content_id: str) -> ContentView:
        return await self.queries.fetch(
            query_key(CONTENT_DETAIL, content_id),
            lambda: self.api.get_content(content_id),
        )

    def accumulator(self, kind: str = "feed") -> FeedAccumulator:
        """Infinite-scroll accumulator over one of the paged lists.

        Args:
            kind: ``feed``, ``discover``, ``personalized`` or ``saved``
        """
        loaders = {
            "feed": self.feed,
            "discover": self.discover,
            "personalized": self.personalized,
            "saved": self.saved,
        }
        if kind not in loaders:
            raise ValueError(f"Unknown content list: {kind}")
        loader = loaders[kind]
        return FeedAccumulator(
            lambda page: loader(page=page), scroll_threshold_px=self.scroll_threshold_px
        )

    # ============================================
    # Interactions
    # ============================================

    async def like(self, content_id: str, liked: bool = True) -> UserContentView | None:
        mutation = Mutation(
            self.api.toggle_content_like,
            invalidates=LIKE_INVALIDATES,
            error_message="Failed to like content",
        )
        return await self.queries.mutate(mutation, content_id, liked)

    async def save(self, content_id: str, saved: bool = True) -> UserContentView | None:
        mutation = Mutation(
            self.api.toggle_content_save,
            invalidates=SAVE_INVALIDATES,
            error_message="Failed to save content",
            success_message="Content saved successfully!" if saved else "Content removed from saved",
        )
        return await self.queries.mutate(mutation, content_id, saved)

    async def dismiss(self, content_id: str) -> UserContentView | None:
        mutation = Mutation(
            self.api.dismiss_content,
            invalidates=DISMISS_INVALIDATES,
            error_message="Failed to dismiss content",
            success_message="Content dismissed",
        )
        return await self.queries.mutate(mutation, content_id)

    async def view(self, content_id: str) -> UserContentView | None:
        """Record that the user opened an item."""
        mutation = Mutation(
            self.api.mark_content_as_viewed,
            invalidates=VIEW_INVALIDATES,
            error_message="Failed to record view",
        )
        return await self.queries.mutate(mutation, content_id)


__all__ = ["ContentService"]
