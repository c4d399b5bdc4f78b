"""Routing surface and route guarding.

Public routes render for anyone. Guarded routes need an authenticated
session; unauthenticated visits are sent to /login and the requested
location is remembered so login can return to it.
"""

from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlsplit

from relevant.core.logging import get_logger
from relevant.models.auth import SessionStatus

logger = get_logger(__name__)

HOME_PATH = "/"
LOGIN_PATH = "/login"
REGISTER_PATH = "/register"
DASHBOARD_PATH = "/dashboard"
SETTINGS_PATH = "/settings"
YOUTUBE_CALLBACK_PATH = "/auth/youtube/callback"

PUBLIC_ROUTES = frozenset({HOME_PATH, LOGIN_PATH, REGISTER_PATH, YOUTUBE_CALLBACK_PATH})
GUARDED_ROUTES = frozenset(
    {DASHBOARD_PATH, "/feed", "/saved", "/profile", SETTINGS_PATH, "/discover", "/you"}
)
# Public pages that an authenticated user is bounced away from
ANONYMOUS_ONLY_ROUTES = frozenset({LOGIN_PATH, REGISTER_PATH})


def split_location(url: str) -> tuple[str, str]:
    """Split ``/path?query`` into a normalized path and the raw query."""
    parts = urlsplit(url or HOME_PATH)
    path = parts.path or HOME_PATH
    if len(path) > 1:
        path = path.rstrip("/")
    return path, parts.query


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of resolving a requested location.

    Attributes:
        requested: Location as requested
        location: Location to render (path + query)
        pending: True while the session is still loading (show a loader)
        return_to: Location remembered for after login, if any
    """

    requested: str
    location: str
    pending: bool = False
    return_to: str | None = None

    @property
    def redirected(self) -> bool:
        return not self.pending and self.location != self.requested

    @property
    def path(self) -> str:
        return split_location(self.location)[0]


class RouteGuard:
    """Decides where a requested location actually lands."""

    def __init__(self, status: Callable[[], SessionStatus]) -> None:
        """Initialize route guard.

        Args:
            status: Callable returning the current session status
        """
        self._status = status

    def resolve(self, url: str) -> RouteDecision:
        path, query = split_location(url)
        requested = f"{path}?{query}" if query else path
        status = self._status()

        if path not in PUBLIC_ROUTES and path not in GUARDED_ROUTES:
            return RouteDecision(requested=requested, location=HOME_PATH)

        if path in ANONYMOUS_ONLY_ROUTES and status == SessionStatus.AUTHENTICATED:
            return RouteDecision(requested=requested, location=DASHBOARD_PATH)

        if path in GUARDED_ROUTES:
            if status in (SessionStatus.UNINITIALIZED, SessionStatus.LOADING):
                return RouteDecision(requested=requested, location=requested, pending=True)
            if status != SessionStatus.AUTHENTICATED:
                return RouteDecision(
                    requested=requested, location=LOGIN_PATH, return_to=requested
                )

        return RouteDecision(requested=requested, location=requested)


class Navigator:
    """Holds the current location, history and remembered return path."""

    def __init__(self, guard: RouteGuard, initial: str = HOME_PATH) -> None:
        self.guard = guard
        self.history: list[str] = [initial]
        self.return_to: str | None = None

    @property
    def location(self) -> str:
        return self.history[-1]

    @property
    def path(self) -> str:
        return split_location(self.location)[0]

    def navigate(self, url: str, replace: bool = False) -> RouteDecision:
        """Go to a location, applying the route guard.

        Args:
            url: Requested location
            replace: Replace the current history entry instead of pushing

        Returns:
            The guard's decision
        """
        decision = self.guard.resolve(url)
        if decision.return_to is not None:
            self.return_to = decision.return_to
        self._record(decision.location, replace)
        if decision.redirected:
            logger.debug(
                "Route redirected", requested=decision.requested, location=decision.location
            )
        return decision

    def redirect(self, url: str) -> RouteDecision:
        """Navigate, replacing the current history entry."""
        return self.navigate(url, replace=True)

    def remember(self, url: str) -> None:
        """Remember a location to return to after login."""
        self.return_to = url

    def pop_return_to(self, default: str = DASHBOARD_PATH) -> str:
        """Consume the remembered location, or the default when none."""
        target = self.return_to or default
        self.return_to = None
        return target

    def count(self, path: str) -> int:
        """How many history entries landed on path."""
        return sum(1 for entry in self.history if split_location(entry)[0] == path)

    def _record(self, location: str, replace: bool) -> None:
        if replace:
            self.history[-1] = location
        else:
            self.history.append(location)


__all__ = [
    "HOME_PATH",
    "LOGIN_PATH",
    "REGISTER_PATH",
    "DASHBOARD_PATH",
    "SETTINGS_PATH",
    "YOUTUBE_CALLBACK_PATH",
    "PUBLIC_ROUTES",
    "GUARDED_ROUTES",
    "RouteDecision",
    "RouteGuard",
    "Navigator",
    "split_location",
]
