"""YouTube account connection (OAuth) flow.

The dashboard never handles Google credentials itself. It asks the API for
an authorization URL, the browser comes back to ``/auth/youtube/callback``
with a code, and the code is handed to the API to finish the exchange.
"""

from collections.abc import Mapping
from urllib.parse import parse_qs, urlencode

from relevant.core.exceptions import APIError, UnauthorizedError
from relevant.core.logging import get_logger
from relevant.infrastructure.api_client import RelevantAPI
from relevant.models.content import ActionResult, YouTubeConnectionStatus
from relevant.services.navigation import SETTINGS_PATH, Navigator, split_location
from relevant.services.notifications import Notifier
from relevant.services.query.client import Mutation, QueryClient
from relevant.services.query.keys import YOUTUBE_INVALIDATES, YOUTUBE_STATUS

logger = get_logger(__name__)

CONNECTED_FLAG = "youtube_connected"


class YouTubeConnectionService:
    """Connect, disconnect and sync the user's YouTube account."""

    def __init__(
        self,
        api: RelevantAPI,
        queries: QueryClient,
        navigator: Navigator,
        notifier: Notifier,
    ) -> None:
        self.api = api
        self.queries = queries
        self.navigator = navigator
        self.notifier = notifier

    async def status(self) -> YouTubeConnectionStatus:
        return await self.queries.fetch((YOUTUBE_STATUS,), self.api.get_youtube_connection_status)

    async def connect(self) -> str | None:
        """Get the authorization URL the browser should open.

        Returns:
            The URL, or None when the API could not provide one
        """
        try:
            url = await self.api.get_youtube_auth_url()
        except UnauthorizedError:
            raise
        except APIError as e:
            logger.warning("Failed to get YouTube auth URL", error=str(e))
            self.notifier.error("Failed to connect to YouTube")
            return None

        if not url:
            self.notifier.error("Failed to get YouTube authorization URL")
            return None
        return url

    async def handle_callback(self, params: Mapping[str, str] | str) -> str:
        """Finish the OAuth round trip and navigate back to settings.

        Args:
            params: Callback query parameters, or the raw query string

        Returns:
            The location navigated to
        """
        if isinstance(params, str):
            params = {k: v[0] for k, v in parse_qs(params.lstrip("?")).items() if v}

        if params.get("error"):
            logger.info("YouTube authorization declined", error=params["error"])
            self.notifier.error("YouTube authorization was cancelled or failed")
            return self.navigator.navigate(SETTINGS_PATH).location

        code = params.get("code")
        if not code:
            self.notifier.error("No authorization code received")
            return self.navigator.navigate(SETTINGS_PATH).location

        try:
            result = await self.api.handle_youtube_callback(code)
        except UnauthorizedError:
            raise
        except APIError as e:
            logger.warning("YouTube callback failed", error=str(e))
            result = ActionResult(success=False)

        if not result.success:
            self.notifier.error("Failed to connect YouTube account")
            return self.navigator.navigate(SETTINGS_PATH).location

        self.queries.invalidate(*YOUTUBE_INVALIDATES)
        self.notifier.success("YouTube account connected successfully!")
        target = f"{SETTINGS_PATH}?{urlencode({CONNECTED_FLAG: 'true'})}"
        return self.navigator.navigate(target).location

    async def consume_connected_flag(self, url: str | None = None) -> YouTubeConnectionStatus | None:
        """Refresh the status when arriving with ``youtube_connected=true``.

        The flag is removed from the current location afterwards.

        Returns:
            The refreshed status, or None when the flag was absent
        """
        location = url if url is not None else self.navigator.location
        path, query = split_location(location)
        params = parse_qs(query)
        if params.get(CONNECTED_FLAG, [""])[0] != "true":
            return None

        remaining = {k: v for k, v in params.items() if k != CONNECTED_FLAG}
        cleaned = f"{path}?{urlencode(remaining, doseq=True)}" if remaining else path
        self.navigator.redirect(cleaned)

        self.queries.invalidate((YOUTUBE_STATUS,))
        return await self.status()

    async def _action(
        self, fn, success_default: str, failure: str
    ) -> ActionResult:
        mutation = Mutation(fn, invalidates=YOUTUBE_INVALIDATES, error_message=failure)
        result = await self.queries.mutate(mutation)
        if result.success:
            self.notifier.success(result.msg or success_default)
        else:
            self.notifier.error(result.msg or failure)
        return result

    async def disconnect(self) -> ActionResult:
        return await self._action(
            self.api.disconnect_youtube,
            "YouTube account disconnected successfully",
            "Failed to disconnect YouTube account",
        )

    async def sync_subscriptions(self) -> ActionResult:
        """Import the connected account's subscriptions as followed channels."""
        return await self._action(
            self.api.sync_youtube_subscriptions,
            "Subscriptions synced successfully!",
            "Failed to sync YouTube subscriptions",
        )


__all__ = ["YouTubeConnectionService", "CONNECTED_FLAG"]
