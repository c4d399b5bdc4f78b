"""Infrastructure layer components.

This module provides the shared HTTP client, session token storage and
the Relevant API client built on them.
"""

from relevant.infrastructure.api_client import RelevantAPI
from relevant.infrastructure.http_client import HTTPClient
from relevant.infrastructure.token_store import FileTokenStore, MemoryTokenStore, TokenStore

__all__ = ["RelevantAPI", "HTTPClient", "TokenStore", "FileTokenStore", "MemoryTokenStore"]
