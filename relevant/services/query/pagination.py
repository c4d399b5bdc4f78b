"""Infinite-scroll accumulation of paged content."""

from collections.abc import Awaitable, Callable

from relevant.core.logging import get_logger
from relevant.models.content import ContentPage, ContentView

logger = get_logger(__name__)

PageFetcher = Callable[[int], Awaitable[ContentPage]]


class FeedAccumulator:
    """Accumulates pages of a list query for infinite scroll.

    Page 1 replaces the accumulated items, later pages append. Only one
    page load runs at a time; items whose id was already seen are dropped.

    Example:
        >>> feed = FeedAccumulator(lambda page: content.feed(page=page))
        >>> await feed.load_next()
        True
        >>> if feed.should_load_more(scroll_top, viewport, height):
        ...     await feed.load_next()
    """

    def __init__(self, fetch_page: PageFetcher, scroll_threshold_px: int = 1000) -> None:
        """Initialize accumulator.

        Args:
            fetch_page: Coroutine function returning the given 1-based page
            scroll_threshold_px: Distance from the bottom that triggers loading
        """
        self._fetch_page = fetch_page
        self.scroll_threshold_px = scroll_threshold_px
        self.items: list[ContentView] = []
        self.page = 0
        self.has_more = True
        self.loading = False
        self.error: Exception | None = None
        self._generation = 0

    @property
    def ids(self) -> list[str]:
        return [item.id for item in self.items]

    async def load_next(self) -> bool:
        """Load the next page unless one is in flight or none remain.

        Returns:
            True if a page was loaded and applied

        Raises:
            RelevantError: When the page fetch fails (error is also kept on ``error``)
        """
        if self.loading or not self.has_more:
            return False

        generation = self._generation
        next_page = self.page + 1
        self.loading = True
        try:
            result = await self._fetch_page(next_page)
        except Exception as e:
            if generation == self._generation:
                self.error = e
            raise
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.debug("Dropped page from before refresh", page=next_page)
            return False

        self._apply(next_page, result)
        return True

    async def refresh(self) -> bool:
        """Forget accumulated pages and load page 1 again."""
        self.reset()
        return await self.load_next()

    def reset(self) -> None:
        self._generation += 1
        self.items = []
        self.page = 0
        self.has_more = True
        self.loading = False
        self.error = None

    def should_load_more(
        self, scroll_top: float, viewport_height: float, document_height: float
    ) -> bool:
        """True when the viewport is within the threshold of the bottom."""
        return scroll_top + viewport_height >= document_height - self.scroll_threshold_px

    def _apply(self, page_number: int, result: ContentPage) -> None:
        if page_number == 1:
            self.items = []

        seen = {item.id for item in self.items}
        added = 0
        for item in result.items:
            if item.id in seen:
                continue
            seen.add(item.id)
            self.items.append(item)
            added += 1

        self.page = page_number
        self.has_more = result.pagination.has_more
        self.error = None
        logger.debug(
            "Applied page",
            page=page_number,
            added=added,
            total=len(self.items),
            has_more=self.has_more,
        )


__all__ = ["FeedAccumulator", "PageFetcher"]
