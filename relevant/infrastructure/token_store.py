"""Session token persistence.

The client keeps exactly one credential: the API token returned by
login/register. It is read at startup and after login, and cleared at
logout or when the API answers 401.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

from relevant.core.logging import get_logger

logger = get_logger(__name__)


class TokenStore(ABC):
    """Storage for the single session token."""

    @abstractmethod
    def load(self) -> str | None:
        """Return the stored token, or None."""

    @abstractmethod
    def save(self, token: str) -> None:
        """Persist the token, replacing any previous one."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored token. Clearing an empty store is a no-op."""


class MemoryTokenStore(TokenStore):
    """In-process token store for tests and throwaway sessions."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def load(self) -> str | None:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """Token store backed by a small JSON file.

    Example:
        >>> store = FileTokenStore(Path("~/.relevant/token.json").expanduser())
        >>> store.save("abc")
        >>> store.load()
        'abc'
    """

    def __init__(self, token_path: Path | str) -> None:
        """Initialize file token store.

        Args:
            token_path: Path of the JSON file holding the token
        """
        self.token_path = Path(token_path).expanduser()

    def load(self) -> str | None:
        """Load token from file.

        Returns:
            Token if the file exists and is readable, None otherwise
        """
        if not self.token_path.exists():
            return None

        try:
            data = json.loads(self.token_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to read token file", path=str(self.token_path), error=str(e))
            return None

        token = data.get("token") if isinstance(data, dict) else None
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        """Write token to file, creating parent directories."""
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(json.dumps({"token": token}), encoding="utf-8")
        logger.debug("Saved token", path=str(self.token_path))

    def clear(self) -> None:
        """Delete the token file if present."""
        self.token_path.unlink(missing_ok=True)
        logger.debug("Cleared token", path=str(self.token_path))


__all__ = ["TokenStore", "MemoryTokenStore", "FileTokenStore"]
