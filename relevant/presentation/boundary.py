"""Per-item render containment.

A failure while rendering one content item must not take down the list
around it. ErrorBoundary runs each render, logs what failed and puts a
fallback block in its place.
"""

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from relevant.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

FALLBACK_TITLE = "Something went wrong"
FALLBACK_BODY = "There was an error rendering this content. Please try refreshing the page."

Fallback = str | Callable[[Exception], Any]


def default_fallback(error: Exception) -> str:
    lines = [FALLBACK_TITLE, FALLBACK_BODY]
    if str(error):
        lines.append(f"Technical details: {error}")
    return "\n".join(lines)


class ErrorBoundary:
    """Contains exceptions raised by a render function.

    Only ``Exception`` is caught; cancellation and interpreter exits pass
    through.

    Example:
        >>> boundary = ErrorBoundary()
        >>> blocks = boundary.render_all(render_content_card, page.items)
    """

    def __init__(self, fallback: Fallback | None = None) -> None:
        """Initialize boundary.

        Args:
            fallback: Replacement block, or a callable building one from the error
        """
        self.fallback = fallback
        self.errors: list[Exception] = []

    @property
    def has_error(self) -> bool:
        return bool(self.errors)

    def _fallback_for(self, error: Exception) -> Any:
        if self.fallback is None:
            return default_fallback(error)
        if callable(self.fallback):
            return self.fallback(error)
        return self.fallback

    def render(self, fn: Callable[[T], R], item: T) -> R | Any:
        try:
            return fn(item)
        except Exception as e:
            self.errors.append(e)
            logger.error(
                "Error boundary caught an error",
                error=str(e),
                error_type=type(e).__name__,
                item_id=getattr(item, "id", None),
                exc_info=True,
            )
            return self._fallback_for(e)

    def render_all(self, fn: Callable[[T], R], items: Iterable[T]) -> list[R | Any]:
        """Render each item independently; one failure yields one fallback."""
        return [self.render(fn, item) for item in items]

    def reset(self) -> None:
        self.errors.clear()


__all__ = ["ErrorBoundary", "default_fallback", "FALLBACK_TITLE"]
