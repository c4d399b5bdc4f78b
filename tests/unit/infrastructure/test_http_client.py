"""Unit tests for HTTP client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from relevant.infrastructure.http_client import HTTPClient


class TestHTTPClientInit:
    """Tests for HTTPClient initialization."""

    @patch("relevant.infrastructure.http_client.httpx.AsyncClient")
    def test_init_default_values(self, mock_async_client):
        """Test initialization with default values."""
        HTTPClient()

        mock_async_client.assert_called_once()
        call_kwargs = mock_async_client.call_args[1]
        assert call_kwargs["follow_redirects"] is True
        assert call_kwargs["headers"] == {"Content-Type": "application/json"}

    @patch("relevant.infrastructure.http_client.httpx.AsyncClient")
    def test_init_base_url(self, mock_async_client):
        """Test base URL is passed to the underlying client."""
        HTTPClient(base_url="http://localhost:5000", timeout=5.0)

        call_kwargs = mock_async_client.call_args[1]
        assert call_kwargs["base_url"] == "http://localhost:5000"


class TestHTTPClientRequests:
    """Tests for HTTPClient request methods."""

    @pytest.fixture
    def mock_client(self):
        """Create HTTPClient with mocked internal client."""
        with patch("relevant.infrastructure.http_client.httpx.AsyncClient") as mock:
            mock_instance = MagicMock()
            mock_instance.request = AsyncMock()
            mock_instance.get = AsyncMock()
            mock_instance.post = AsyncMock()
            mock_instance.put = AsyncMock()
            mock_instance.delete = AsyncMock()
            mock_instance.aclose = AsyncMock()
            mock.return_value = mock_instance

            client = HTTPClient()
            yield client, mock_instance

    @pytest.mark.asyncio
    async def test_request(self, mock_client):
        """Test generic request."""
        client, mock_instance = mock_client

        await client.request("PATCH", "/api/x", json={"a": 1})

        mock_instance.request.assert_called_once_with("PATCH", "/api/x", json={"a": 1})

    @pytest.mark.asyncio
    async def test_get_with_params(self, mock_client):
        """Test GET request with query parameters."""
        client, mock_instance = mock_client

        await client.get("/api/content/feed", params={"page": 1})

        mock_instance.get.assert_called_once_with("/api/content/feed", params={"page": 1})

    @pytest.mark.asyncio
    async def test_post_put_delete(self, mock_client):
        """Test the write verbs."""
        client, mock_instance = mock_client

        await client.post("/a", json={})
        await client.put("/b", json={})
        await client.delete("/c")

        mock_instance.post.assert_called_once_with("/a", json={})
        mock_instance.put.assert_called_once_with("/b", json={})
        mock_instance.delete.assert_called_once_with("/c")

    @pytest.mark.asyncio
    async def test_close(self, mock_client):
        """Test closing the client."""
        client, mock_instance = mock_client

        await client.close()

        mock_instance.aclose.assert_called_once()


@pytest.mark.asyncio
async def test_mock_transport_round_trip():
    """Requests go through an injected transport."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"path": request.url.path})

    client = HTTPClient(base_url="http://api.test", transport=httpx.MockTransport(handler))
    response = await client.get("/api/auth/me")
    await client.close()

    assert response.json() == {"path": "/api/auth/me"}
    assert client.is_closed
