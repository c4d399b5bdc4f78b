"""HTTP Client for shared connection management.

This module provides a managed httpx.AsyncClient bound to the Relevant
API base URL, reused across every API call.
"""

import httpx

from relevant.core.logging import get_logger

logger = get_logger(__name__)


class HTTPClient:
    """Managed HTTP client with connection reuse.

    Designed for DI injection. Create once at startup, inject where
    needed, close at shutdown.

    Example:
        http_client = HTTPClient(base_url="http://localhost:5000")
        response = await http_client.get("/api/auth/me")
        await http_client.close()
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            base_url: Prefix for relative request URLs
            timeout: Request timeout in seconds
            max_connections: Maximum number of connections
            max_keepalive_connections: Maximum keepalive connections
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive_connections,
            ),
            headers={"Content-Type": "application/json"},
            follow_redirects=True,
            transport=transport,
        )
        logger.info(
            "HTTP client initialized",
            base_url=base_url,
            timeout=timeout,
            max_connections=max_connections,
            max_keepalive=max_keepalive_connections,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request with any method."""
        return await self._client.request(method, url, **kwargs)

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """Send GET request."""
        return await self._client.get(url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        """Send POST request."""
        return await self._client.post(url, **kwargs)

    async def put(self, url: str, **kwargs) -> httpx.Response:
        """Send PUT request."""
        return await self._client.put(url, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        """Send DELETE request."""
        return await self._client.delete(url, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()
        logger.info("HTTP client closed")


__all__ = ["HTTPClient"]
