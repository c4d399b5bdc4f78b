"""Per-page query configuration models.

Each dashboard page reads content with its own page size, relevance floor
and freshness window. Stale times are in seconds.
"""

from pydantic import BaseModel, Field


class PageQueryOptions(BaseModel):
    """Query settings for one content page.

    Attributes:
        page_size: Items requested per page
        min_relevance: Lowest relevance score the feed should return
        stale_time: Seconds a fetched page is served without refetching
    """

    page_size: int = Field(default=10, ge=1, le=100)
    min_relevance: float | None = Field(default=None, ge=0.0, le=1.0)
    stale_time: float = Field(default=0.0, ge=0.0)


class QueryOptions(BaseModel):
    """Query settings for the whole dashboard.

    Attributes:
        feed: The main infinite-scroll feed
        home: Personalized home shelf
        discover: Discover page
        saved: Saved list
        search: Search results
    """

    feed: PageQueryOptions = Field(
        default_factory=lambda: PageQueryOptions(page_size=10, min_relevance=0.3)
    )
    home: PageQueryOptions = Field(
        default_factory=lambda: PageQueryOptions(
            page_size=12, min_relevance=0.4, stale_time=5 * 60
        )
    )
    discover: PageQueryOptions = Field(
        default_factory=lambda: PageQueryOptions(
            page_size=18, min_relevance=0.2, stale_time=2 * 60
        )
    )
    saved: PageQueryOptions = Field(default_factory=lambda: PageQueryOptions(page_size=10))
    search: PageQueryOptions = Field(default_factory=lambda: PageQueryOptions(page_size=10))


def build_query_options(feed_page_size: int = 10) -> QueryOptions:
    """Default options with the main feed page size taken from settings."""
    options = QueryOptions()
    options.feed = PageQueryOptions(
        page_size=feed_page_size,
        min_relevance=options.feed.min_relevance,
        stale_time=options.feed.stale_time,
    )
    return options


__all__ = ["PageQueryOptions", "QueryOptions", "build_query_options"]
