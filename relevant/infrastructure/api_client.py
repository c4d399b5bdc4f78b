"""Relevant REST API client.

One async method per backend endpoint. Every request carries the stored
session token. Failures surface as typed exceptions:

- UnauthorizedError for 401 (callers own the logout/redirect reaction)
- APIResponseError for other non-2xx answers, with the server's message
- NetworkError when no response was received

Content payloads are normalized before they leave this module.
"""

from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from relevant.core.config import AuthHeaderScheme
from relevant.core.exceptions import (
    APIResponseError,
    MalformedResponseError,
    NetworkError,
    UnauthorizedError,
)
from relevant.core.logging import get_logger
from relevant.infrastructure.http_client import HTTPClient
from relevant.infrastructure.token_store import TokenStore
from relevant.models.auth import AuthResponse, LoginForm, RegisterForm
from relevant.models.content import (
    ActionResult,
    ContentPage,
    ContentView,
    Pagination,
    ProcessingStatus,
    UserContentView,
    YouTubeConnectionStatus,
)
from relevant.models.user import (
    InterestCategoryForm,
    Interests,
    PreferencesForm,
    User,
    UserStats,
    YouTubeChannelForm,
    YouTubeSource,
)
from relevant.services.normalizer import (
    normalize_content,
    normalize_content_list,
    normalize_user_content,
)

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def _server_message(response: httpx.Response) -> str:
    """Extract ``msg``/``message`` from an error body, falling back to the reason."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("msg", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or f"HTTP {response.status_code}"


class RelevantAPI:
    """Async client for the Relevant backend.

    Example:
        >>> api = RelevantAPI(HTTPClient(base_url=cfg.api_base_url), FileTokenStore(path))
        >>> auth = await api.login(LoginForm(email="a@b.co", password="secret"))
        >>> page = await api.get_content_feed(page=1, limit=10)
    """

    def __init__(
        self,
        http_client: HTTPClient,
        token_store: TokenStore,
        auth_header_scheme: AuthHeaderScheme = "x-auth-token",
    ) -> None:
        """Initialize API client.

        Args:
            http_client: Shared HTTP client bound to the API base URL
            token_store: Where the session token is read from
            auth_header_scheme: ``x-auth-token`` header or ``Authorization: Bearer``
        """
        self.http_client = http_client
        self.token_store = token_store
        self.auth_header_scheme = auth_header_scheme

    # ============================================
    # Transport
    # ============================================

    def auth_headers(self) -> dict[str, str]:
        """Headers carrying the stored token (empty when logged out)."""
        token = self.token_store.load()
        if not token:
            return {}
        if self.auth_header_scheme == "bearer":
            return {"Authorization": f"Bearer {token}"}
        return {"x-auth-token": token}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"headers": self.auth_headers()}
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self.http_client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning("API request failed", method=method, endpoint=path, error=str(e))
            raise NetworkError(f"Request to {path} failed: {e}", endpoint=path) from e

        if response.status_code == 401:
            logger.info("API rejected credentials", method=method, endpoint=path)
            raise UnauthorizedError(_server_message(response), endpoint=path)

        if response.is_error:
            message = _server_message(response)
            logger.warning(
                "API error response",
                method=method,
                endpoint=path,
                status_code=response.status_code,
                message=message,
            )
            raise APIResponseError(
                message,
                status_code=response.status_code,
                endpoint=path,
                response_body=response.text,
            )

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Malformed JSON response",
                status_code=response.status_code,
                endpoint=path,
                response_body=response.text,
            ) from e
        return body if isinstance(body, dict) else {"data": body}

    def _parse(self, model: type[M], data: Any, endpoint: str) -> M:
        """Validate a success body; shape mismatches become MalformedResponseError."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "Malformed API response",
                endpoint=endpoint,
                model=model.__name__,
                errors=e.error_count(),
            )
            raise MalformedResponseError(
                "Malformed response",
                status_code=200,
                endpoint=endpoint,
                response_body=str(data),
            ) from e

    def _page(
        self, body: dict[str, Any], endpoint: str, items_key: str = "content"
    ) -> ContentPage:
        return ContentPage(
            items=normalize_content_list(body.get(items_key)),
            pagination=self._parse(Pagination, body.get("pagination") or {}, endpoint),
            query=body.get("query"),
        )

    # ============================================
    # Auth
    # ============================================

    async def register(self, form: RegisterForm) -> AuthResponse:
        body = await self._request("POST", "/api/auth/register", json=form.to_payload())
        return self._parse(AuthResponse, body, "/api/auth/register")

    async def login(self, form: LoginForm) -> AuthResponse:
        body = await self._request("POST", "/api/auth/login", json=form.to_payload())
        return self._parse(AuthResponse, body, "/api/auth/login")

    async def get_current_user(self) -> User:
        body = await self._request("GET", "/api/auth/me")
        return self._parse(User, body.get("user") or {}, "/api/auth/me")

    # ============================================
    # User profile
    # ============================================

    async def get_user_profile(self) -> User:
        body = await self._request("GET", "/api/user/profile")
        return self._parse(User, body.get("user") or {}, "/api/user/profile")

    async def update_interests(self, interests: Interests) -> User:
        body = await self._request(
            "PUT",
            "/api/user/interests",
            json={"interests": interests.model_dump(by_alias=True)},
        )
        return self._parse(User, body.get("user") or {}, "/api/user/interests")

    async def add_interest_category(self, form: InterestCategoryForm) -> ActionResult:
        body = await self._request(
            "POST", "/api/user/interests/categories", json=form.to_payload()
        )
        return self._parse(ActionResult, body, "/api/user/interests/categories")

    async def delete_interest_category(self, category: str) -> ActionResult:
        path = f"/api/user/interests/categories/{quote(category, safe='')}"
        body = await self._request("DELETE", path)
        return self._parse(ActionResult, body, path)

    async def add_youtube_channel(self, form: YouTubeChannelForm) -> list[YouTubeSource]:
        path = "/api/user/youtube-sources"
        body = await self._request("POST", path, json=form.to_payload())
        return [self._parse(YouTubeSource, s, path) for s in body.get("youtubeSources") or []]

    async def remove_youtube_channel(self, channel_id: str) -> list[YouTubeSource]:
        path = f"/api/user/youtube-sources/{quote(channel_id, safe='')}"
        body = await self._request("DELETE", path)
        return [self._parse(YouTubeSource, s, path) for s in body.get("youtubeSources") or []]

    async def update_preferences(self, form: PreferencesForm) -> User:
        body = await self._request("PUT", "/api/user/preferences", json=form.to_payload())
        return self._parse(User, body.get("user") or {}, "/api/user/preferences")

    async def get_user_stats(self) -> UserStats:
        body = await self._request("GET", "/api/user/stats")
        return self._parse(UserStats, body.get("stats") or {}, "/api/user/stats")

    # ============================================
    # Content
    # ============================================

    async def get_content_feed(
        self,
        page: int | None = None,
        limit: int | None = None,
        min_relevance: float | None = None,
    ) -> ContentPage:
        body = await self._request(
            "GET",
            "/api/content/feed",
            params={"page": page, "limit": limit, "minRelevance": min_relevance},
        )
        return self._page(body, "/api/content/feed")

    async def search_content(
        self, query: str, page: int | None = None, limit: int | None = None
    ) -> ContentPage:
        body = await self._request(
            "GET",
            "/api/content/search",
            params={"q": query, "page": page, "limit": limit},
        )
        result = self._page(body, "/api/content/search", items_key="results")
        if result.query is None:
            result.query = query
        return result

    async def get_content(self, content_id: str) -> ContentView:
        body = await self._request("GET", f"/api/content/{quote(content_id, safe='')}")
        content = body.get("content")
        if isinstance(content, dict) and body.get("userContent") and "userContent" not in content:
            content = {**content, "userContent": body["userContent"]}
        return normalize_content(content)

    async def _interaction(
        self, content_id: str, action: str, json: Any = None
    ) -> UserContentView | None:
        body = await self._request(
            "POST", f"/api/content/{quote(content_id, safe='')}/{action}", json=json
        )
        return normalize_user_content(body.get("userContent"), {}, content_id, "")

    async def mark_content_as_viewed(self, content_id: str) -> UserContentView | None:
        return await self._interaction(content_id, "view")

    async def toggle_content_like(self, content_id: str, liked: bool) -> UserContentView | None:
        return await self._interaction(content_id, "like", json={"liked": liked})

    async def toggle_content_save(self, content_id: str, saved: bool) -> UserContentView | None:
        return await self._interaction(content_id, "save", json={"saved": saved})

    async def dismiss_content(self, content_id: str) -> UserContentView | None:
        return await self._interaction(content_id, "dismiss")

    async def get_saved_content(
        self, page: int | None = None, limit: int | None = None
    ) -> ContentPage:
        body = await self._request(
            "GET", "/api/content/saved/list", params={"page": page, "limit": limit}
        )
        return self._page(body, "/api/content/saved/list")

    # ============================================
    # YouTube OAuth connection
    # ============================================

    async def get_youtube_auth_url(self) -> str:
        body = await self._request("GET", "/api/youtube/auth-url")
        return str(body.get("authUrl") or "")

    async def handle_youtube_callback(self, code: str) -> ActionResult:
        body = await self._request("POST", "/api/youtube/callback", json={"code": code})
        return self._parse(ActionResult, body, "/api/youtube/callback")

    async def get_youtube_connection_status(self) -> YouTubeConnectionStatus:
        body = await self._request("GET", "/api/youtube/status")
        return self._parse(YouTubeConnectionStatus, body, "/api/youtube/status")

    async def disconnect_youtube(self) -> ActionResult:
        body = await self._request("POST", "/api/youtube/disconnect")
        return self._parse(ActionResult, body, "/api/youtube/disconnect")

    async def sync_youtube_subscriptions(self) -> ActionResult:
        body = await self._request("POST", "/api/youtube/sync")
        result = self._parse(ActionResult, body, "/api/youtube/sync")
        if "subscriptionsAdded" in body:
            result.extra["subscriptions_added"] = body["subscriptionsAdded"]
        return result

    # ============================================
    # Processing & admin
    # ============================================

    async def get_processing_status(self) -> ProcessingStatus:
        body = await self._request("GET", "/api/processing/status")
        return self._parse(
            ProcessingStatus, body.get("status") or body, "/api/processing/status"
        )

    async def process_subscriptions(self) -> ActionResult:
        body = await self._request("POST", "/api/processing/subscriptions")
        return self._parse(ActionResult, body, "/api/processing/subscriptions")

    async def get_admin_diagnostics(self) -> dict[str, Any]:
        return await self._request("GET", "/api/admin/diagnostics")


__all__ = ["RelevantAPI"]
