"""Unit tests for the YouTube account connection flow."""

import httpx
import pytest

from relevant.core.exceptions import UnauthorizedError
from relevant.models.auth import SessionStatus
from relevant.services.navigation import Navigator, RouteGuard
from relevant.services.notifications import NotificationLevel, Notifier
from relevant.services.query.client import QueryClient
from relevant.services.query.keys import YOUTUBE_STATUS
from relevant.services.youtube_oauth import YouTubeConnectionService


class YouTubeAPI:
    """Handler answering the /api/youtube endpoints with canned bodies."""

    def __init__(self) -> None:
        self.responses: dict[str, tuple[int, dict]] = {
            "/api/youtube/auth-url": (
                200,
                {"authUrl": "https://accounts.google.com/o/oauth2/auth?x=1"},
            ),
            "/api/youtube/callback": (200, {"success": True}),
            "/api/youtube/status": (200, {"connected": True, "channelTitle": "My Channel"}),
            "/api/youtube/disconnect": (200, {"success": True, "msg": "Disconnected"}),
            "/api/youtube/sync": (200, {"success": True, "subscriptionsAdded": 3}),
        }
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request.url.path)
        status, body = self.responses.get(request.url.path, (404, {"msg": "Not found"}))
        return httpx.Response(status, json=body)


@pytest.fixture
def youtube_api():
    return YouTubeAPI()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def navigator():
    return Navigator(RouteGuard(lambda: SessionStatus.AUTHENTICATED))


@pytest.fixture
def queries(notifier):
    return QueryClient(retry=0, default_stale_time=60, notifier=notifier)


@pytest.fixture
def youtube(make_api, youtube_api, queries, navigator, notifier):
    api, _ = make_api(youtube_api, token="test-token")
    return YouTubeConnectionService(api, queries, navigator, notifier)


class TestConnect:
    """Tests for starting the OAuth flow."""

    @pytest.mark.asyncio
    async def test_returns_auth_url(self, youtube):
        assert (await youtube.connect()).startswith("https://accounts.google.com/")

    @pytest.mark.asyncio
    async def test_empty_url(self, youtube, youtube_api, notifier):
        youtube_api.responses["/api/youtube/auth-url"] = (200, {})

        assert await youtube.connect() is None
        assert notifier.last.message == "Failed to get YouTube authorization URL"

    @pytest.mark.asyncio
    async def test_api_failure(self, youtube, youtube_api, notifier):
        youtube_api.responses["/api/youtube/auth-url"] = (500, {})

        assert await youtube.connect() is None
        assert notifier.last.message == "Failed to connect to YouTube"

    @pytest.mark.asyncio
    async def test_unauthorized_propagates(self, youtube, youtube_api, notifier):
        youtube_api.responses["/api/youtube/auth-url"] = (401, {})

        with pytest.raises(UnauthorizedError):
            await youtube.connect()

        assert notifier.items == []


class TestCallback:
    """Tests for finishing the OAuth flow."""

    @pytest.mark.asyncio
    async def test_success(self, youtube, queries, navigator, notifier):
        await youtube.status()

        location = await youtube.handle_callback("?code=abc&scope=youtube")

        assert location == "/settings?youtube_connected=true"
        assert navigator.location == location
        assert notifier.last.message == "YouTube account connected successfully!"
        assert queries.get_query_state((YOUTUBE_STATUS,)).is_stale

    @pytest.mark.asyncio
    async def test_declined(self, youtube, youtube_api, notifier):
        location = await youtube.handle_callback({"error": "access_denied"})

        assert location == "/settings"
        assert notifier.last.message == "YouTube authorization was cancelled or failed"
        assert "/api/youtube/callback" not in youtube_api.calls

    @pytest.mark.asyncio
    async def test_missing_code(self, youtube, notifier):
        assert await youtube.handle_callback("") == "/settings"
        assert notifier.last.message == "No authorization code received"

    @pytest.mark.parametrize(
        "response",
        [
            (200, {"success": False}),
            (400, {"msg": "invalid_grant"}),
        ],
    )
    @pytest.mark.asyncio
    async def test_exchange_failure(self, youtube, youtube_api, notifier, response):
        youtube_api.responses["/api/youtube/callback"] = response

        assert await youtube.handle_callback({"code": "abc"}) == "/settings"
        assert notifier.last.level == NotificationLevel.ERROR
        assert notifier.last.message == "Failed to connect YouTube account"


class TestConnectedFlag:
    """Tests for the post-callback status refresh."""

    @pytest.mark.asyncio
    async def test_flag_is_consumed(self, youtube, navigator):
        navigator.navigate("/settings?youtube_connected=true&tab=accounts")

        status = await youtube.consume_connected_flag()

        assert status.connected is True
        assert status.channel_title == "My Channel"
        assert navigator.location == "/settings?tab=accounts"

    @pytest.mark.asyncio
    async def test_no_flag(self, youtube, youtube_api):
        assert await youtube.consume_connected_flag("/settings") is None
        assert youtube_api.calls == []


class TestAccountActions:
    """Tests for disconnect and sync."""

    @pytest.mark.asyncio
    async def test_disconnect_uses_server_message(self, youtube, notifier):
        result = await youtube.disconnect()

        assert result.success is True
        assert notifier.last.message == "Disconnected"

    @pytest.mark.asyncio
    async def test_sync_default_message(self, youtube, notifier):
        result = await youtube.sync_subscriptions()

        assert result.extra["subscriptions_added"] == 3
        assert notifier.last.message == "Subscriptions synced successfully!"

    @pytest.mark.asyncio
    async def test_unsuccessful_result(self, youtube, youtube_api, notifier):
        youtube_api.responses["/api/youtube/disconnect"] = (200, {"success": False})

        await youtube.disconnect()

        assert notifier.last.level == NotificationLevel.ERROR
        assert notifier.last.message == "Failed to disconnect YouTube account"
