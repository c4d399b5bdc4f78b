"""Application configuration using Pydantic Settings.

This module defines all client configuration loaded from environment variables.
Configuration is validated at startup and provides type-safe access throughout the app.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AuthHeaderScheme = Literal["x-auth-token", "bearer"]


class Config(BaseSettings):
    """Client configuration.

    All configuration is loaded from environment variables or .env file.
    Validation happens automatically via Pydantic.

    Example:
        >>> config = Config()
        >>> print(config.app_name)
        'Relevant'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================
    # Application Settings
    # ============================================
    app_name: str = Field(default="Relevant", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    # ============================================
    # Relevant API
    # ============================================
    api_base_url: str = Field(
        default="http://localhost:5000", description="Base URL of the Relevant REST API"
    )
    api_timeout: float = Field(default=30.0, description="Request timeout in seconds", gt=0)
    auth_header_scheme: AuthHeaderScheme = Field(
        default="x-auth-token",
        description="How the stored token is attached: 'x-auth-token' header or Bearer",
    )
    token_path: Path = Field(
        default=Path.home() / ".relevant" / "token.json",
        description="Where the session token is persisted",
    )

    # ============================================
    # Data Synchronization
    # ============================================
    query_retry: int = Field(
        default=1, description="Retries for failed read queries", ge=0, le=5
    )
    default_stale_time: float = Field(
        default=0.0, description="Seconds a cached query stays fresh", ge=0
    )
    feed_page_size: int = Field(default=10, description="Items per feed page", ge=1, le=100)
    scroll_threshold_px: int = Field(
        default=1000, description="Distance from bottom that triggers the next page", ge=0
    )
    processing_poll_interval: float = Field(
        default=5.0, description="Seconds between processing status polls", gt=0
    )

    # ============================================
    # Static Server
    # ============================================
    static_dir: Path = Field(default=Path("dist"), description="Bundled UI directory")
    host: str = Field(default="0.0.0.0", description="Static server host")
    port: int = Field(
        default=4173,
        description="Static server port",
        ge=1,
        le=65535,
    )

    @field_validator("api_base_url", mode="before")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Ensure the API URL is http(s) and has no trailing slash.

        Args:
            v: API base URL string

        Returns:
            Validated base URL

        Raises:
            ValueError: If URL is not http or https
        """
        if isinstance(v, str):
            if not v.startswith(("http://", "https://")):
                raise ValueError("api_base_url must start with http:// or https://")
            return v.rstrip("/")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode.

        Returns:
            True if app_env is 'development'
        """
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if app_env is 'production'
        """
        return self.app_env == "production"


# =============================================================================
# Singleton accessor
# =============================================================================

_config: Config | None = None


def get_config() -> Config:
    """Get the global Config singleton.

    Use this instead of importing `container.config()` to avoid circular imports.

    Returns:
        The global Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
