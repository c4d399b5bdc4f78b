"""Dashboard composition root.

Owns the pieces a running dashboard needs (session, navigation, query
cache and the feature services) and the reactions that cut across them:
login returning to the page that asked for it, and a rejected credential
logging the user out exactly once.
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from relevant.core.exceptions import UnauthorizedError
from relevant.core.logging import get_logger
from relevant.infrastructure.http_client import HTTPClient
from relevant.models.auth import LoginForm, RegisterForm
from relevant.models.user import User
from relevant.services.content import ContentService
from relevant.services.navigation import (
    GUARDED_ROUTES,
    HOME_PATH,
    LOGIN_PATH,
    Navigator,
    RouteDecision,
)
from relevant.services.notifications import Notifier
from relevant.services.processing import ProcessingService
from relevant.services.profile import ProfileService
from relevant.services.query.client import QueryClient
from relevant.services.session import SessionStore
from relevant.services.youtube_oauth import YouTubeConnectionService

logger = get_logger(__name__)

T = TypeVar("T")


class Dashboard:
    """A running dashboard session.

    Example:
        >>> dashboard = container.dashboard()
        >>> await dashboard.start("/saved")
        >>> await dashboard.login("testuser@relevant.com", "testpass123")
        >>> dashboard.navigator.location
        '/saved'
        >>> page = await dashboard.call(dashboard.content.saved)
    """

    def __init__(
        self,
        http_client: HTTPClient,
        session: SessionStore,
        navigator: Navigator,
        queries: QueryClient,
        notifier: Notifier,
        content: ContentService,
        profile: ProfileService,
        youtube: YouTubeConnectionService,
        processing: ProcessingService,
    ) -> None:
        self.http_client = http_client
        self.session = session
        self.navigator = navigator
        self.queries = queries
        self.notifier = notifier
        self.content = content
        self.profile = profile
        self.youtube = youtube
        self.processing = processing
        # Every 401 the cache sees ends the session, awaited or not
        self.queries.on_unauthorized = self.handle_unauthorized

    # ============================================
    # Lifecycle
    # ============================================

    async def start(self, location: str = HOME_PATH) -> RouteDecision:
        """Restore the session, then open the requested location."""
        await self.session.initialize()
        return self.navigator.navigate(location)

    async def close(self) -> None:
        """Cancel queries, forget in-memory state and close the HTTP client."""
        self.queries.clear()
        self.session.close()
        await self.http_client.close()
        logger.info("Dashboard closed")

    async def __aenter__(self) -> "Dashboard":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ============================================
    # Navigation & auth
    # ============================================

    def navigate(self, location: str) -> RouteDecision:
        return self.navigator.navigate(location)

    async def login(self, email: str, password: str) -> User:
        """Log in and go back to the page that required it.

        Raises:
            FormValidationError: If the form is invalid (no request is made)
            APIError: If the API rejects the login
        """
        form = LoginForm.parse_form(email=email, password=password)
        user = await self.session.login(form)
        self._after_authentication()
        return user

    async def register(self, email: str, password: str, name: str | None = None) -> User:
        form = RegisterForm.parse_form(email=email, password=password, name=name)
        user = await self.session.register(form)
        self._after_authentication()
        return user

    def _after_authentication(self) -> None:
        self.queries.clear()
        self.navigator.navigate(self.navigator.pop_return_to())

    def logout(self) -> RouteDecision:
        self.session.logout()
        self.queries.clear()
        return self.navigator.navigate(LOGIN_PATH)

    def handle_unauthorized(self) -> bool:
        """React to a 401: drop the credential and show the login page.

        Returns:
            True if this call performed the logout, False if the session
            had already been ended
        """
        if not self.session.session_expired():
            return False

        if self.navigator.path in GUARDED_ROUTES:
            self.navigator.remember(self.navigator.location)
        # Discard cached and in-flight data without cancelling sibling calls
        self.queries.invalidate(())
        self.navigator.redirect(LOGIN_PATH)
        logger.info("Redirected to login after 401")
        return True

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Run a service call, logging out if the API rejects the credential.

        Raises:
            UnauthorizedError: After the logout/redirect has been handled
        """
        try:
            return await fn(*args, **kwargs)
        except UnauthorizedError:
            self.handle_unauthorized()
            raise


__all__ = ["Dashboard"]
