"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests, including an
in-process fake of the Relevant API served through httpx.MockTransport.
"""

import json
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from relevant.core.logging import setup_logging
from relevant.dashboard import Dashboard
from relevant.infrastructure.api_client import RelevantAPI
from relevant.infrastructure.http_client import HTTPClient
from relevant.infrastructure.token_store import MemoryTokenStore
from relevant.services.content import ContentService
from relevant.services.navigation import Navigator, RouteGuard
from relevant.services.notifications import Notifier
from relevant.services.processing import ProcessingService
from relevant.services.profile import ProfileService
from relevant.services.query.client import QueryClient
from relevant.services.session import SessionStore
from relevant.services.youtube_oauth import YouTubeConnectionService

# Setup logging for tests
setup_logging()

TEST_EMAIL = "testuser@relevant.com"
TEST_PASSWORD = "testpass123"
TEST_TOKEN = "test-token"

TEST_USER = {
    "_id": "user-1",
    "email": TEST_EMAIL,
    "name": "Test User",
    "interests": {"Technology": {"priority": 8, "keywords": ["AI"]}},
    "youtubeSources": [],
    "preferences": {"emailNotifications": True, "contentLanguage": "en", "feedFrequency": "daily"},
}


def make_content(index: int, **overrides: Any) -> dict[str, Any]:
    """Canonical content payload as the API returns it."""
    payload = {
        "_id": f"c{index}",
        "title": f"Video {index}",
        "description": f"Description {index}",
        "url": f"https://youtube.com/watch?v=v{index}",
        "source": "youtube",
        "sourceId": f"v{index}",
        "sourceChannel": {"id": "ch1", "name": "Channel One"},
        "thumbnail": f"https://img.example.com/{index}.jpg",
        "publishedAt": "2024-01-01T00:00:00Z",
        "createdAt": "2024-01-02T00:00:00Z",
        "duration": 120,
        "tags": ["ai"],
        "category": "technology",
        "summary": f"Summary {index}",
        "highlights": [f"Highlight {index}"],
        "keyPoints": [],
        "relevantTopics": ["AI"],
        "processed": True,
    }
    payload.update(overrides)
    return payload


class FakeBackend:
    """Minimal stateful stand-in for the Relevant REST API."""

    def __init__(self, total_items: int = 25) -> None:
        self.contents = [make_content(i) for i in range(1, total_items + 1)]
        self.valid_tokens = {TEST_TOKEN}
        self.saved: set[str] = set()
        self.liked: set[str] = set()
        self.dismissed: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.forced: dict[str, list[int]] = {}

    def fail(self, path: str, *statuses: int) -> None:
        """Answer the next requests to path with the given statuses."""
        self.forced.setdefault(path, []).extend(statuses)

    def count(self, method: str, path: str) -> int:
        return sum(1 for call in self.calls if call == (method, path))

    def _user_content(self, content_id: str) -> dict[str, Any]:
        return {
            "_id": f"uc-{content_id}",
            "userId": TEST_USER["_id"],
            "contentId": content_id,
            "relevanceScore": 0.8,
            "matchedInterests": ["AI"],
            "liked": content_id in self.liked,
            "saved": content_id in self.saved,
            "dismissed": content_id in self.dismissed,
            "viewed": False,
        }

    def _with_overlay(self, item: dict[str, Any]) -> dict[str, Any]:
        return {**item, "userContent": self._user_content(item["_id"])}

    def _page(self, items: list[dict[str, Any]], request: httpx.Request) -> dict[str, Any]:
        page = int(request.url.params.get("page", 1))
        limit = int(request.url.params.get("limit", 10))
        start = (page - 1) * limit
        chunk = items[start : start + limit]
        return {
            "success": True,
            "content": [self._with_overlay(item) for item in chunk],
            "pagination": {
                "currentPage": page,
                "totalItems": len(items),
                "hasMore": start + limit < len(items),
            },
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.calls.append((method, path))

        if self.forced.get(path):
            status = self.forced[path].pop(0)
            return httpx.Response(status, json={"msg": f"Forced {status}"})

        if path == "/api/auth/login":
            body = json.loads(request.content)
            if body.get("email") == TEST_EMAIL and body.get("password") == TEST_PASSWORD:
                return httpx.Response(
                    200, json={"success": True, "token": TEST_TOKEN, "user": TEST_USER}
                )
            return httpx.Response(400, json={"msg": "Invalid credentials"})

        if request.headers.get("x-auth-token") not in self.valid_tokens:
            return httpx.Response(401, json={"msg": "Token is not valid"})

        if path in ("/api/auth/me", "/api/user/profile"):
            return httpx.Response(200, json={"success": True, "user": TEST_USER})

        if path == "/api/content/feed":
            visible = [c for c in self.contents if c["_id"] not in self.dismissed]
            return httpx.Response(200, json=self._page(visible, request))

        if path == "/api/content/saved/list":
            saved = [c for c in self.contents if c["_id"] in self.saved]
            return httpx.Response(200, json=self._page(saved, request))

        if method == "GET" and path.startswith("/api/content/"):
            content_id = path.split("/")[3]
            for item in self.contents:
                if item["_id"] == content_id:
                    return httpx.Response(
                        200,
                        json={
                            "success": True,
                            "content": item,
                            "userContent": self._user_content(content_id),
                        },
                    )

        if method == "POST" and path.startswith("/api/content/"):
            content_id, action = path.split("/")[3:5]
            body = json.loads(request.content) if request.content else {}
            if action == "save":
                (self.saved.add if body.get("saved") else self.saved.discard)(content_id)
            elif action == "like":
                (self.liked.add if body.get("liked") else self.liked.discard)(content_id)
            elif action == "dismiss":
                self.dismissed.add(content_id)
            return httpx.Response(
                200, json={"success": True, "userContent": self._user_content(content_id)}
            )

        return httpx.Response(404, json={"msg": "Not found"})


@pytest.fixture
def backend() -> FakeBackend:
    """Fresh fake API state for each test."""
    return FakeBackend()


@pytest.fixture
def make_api() -> Callable[..., tuple[RelevantAPI, MemoryTokenStore]]:
    """Build an API client whose HTTP calls go to a handler function."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        token: str | None = None,
        scheme: str = "x-auth-token",
    ) -> tuple[RelevantAPI, MemoryTokenStore]:
        http_client = HTTPClient(
            base_url="http://api.test", transport=httpx.MockTransport(handler)
        )
        store = MemoryTokenStore(token)
        return RelevantAPI(http_client, store, auth_header_scheme=scheme), store

    return _make


@pytest_asyncio.fixture
async def dashboard(backend: FakeBackend) -> AsyncGenerator[Dashboard, None]:
    """Dashboard wired to the fake backend with an in-memory token store.

    Yields:
        Dashboard (closed after the test)
    """
    http_client = HTTPClient(
        base_url="http://api.test", transport=httpx.MockTransport(backend.handler)
    )
    store = MemoryTokenStore()
    api = RelevantAPI(http_client, store)
    notifier = Notifier()
    session = SessionStore(api, store, notifier)
    navigator = Navigator(RouteGuard(lambda: session.status))
    queries = QueryClient(retry=1, notifier=notifier)

    board = Dashboard(
        http_client=http_client,
        session=session,
        navigator=navigator,
        queries=queries,
        notifier=notifier,
        content=ContentService(api, queries),
        profile=ProfileService(api, queries, session),
        youtube=YouTubeConnectionService(api, queries, navigator, notifier),
        processing=ProcessingService(api, queries, poll_interval=0),
    )
    yield board
    await board.close()
