"""Custom exceptions for the Relevant dashboard client.

This module defines all custom exceptions used throughout the client.
All exceptions inherit from RelevantError for easy catching.

Exception classes include context dictionaries for structured logging
and debugging. Use the `context` property to access additional details.
"""

from typing import Any


class RelevantError(Exception):
    """Base exception for all Relevant client errors.

    Provides a context dictionary for structured error information.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise RelevantError("Something went wrong", context={"user_id": "123"})
        ... except RelevantError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize RelevantError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **kwargs: Any) -> "RelevantError":
        """Add additional context to the exception.

        Args:
            **kwargs: Key-value pairs to add to context

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


# ============================================
# Configuration Errors
# ============================================


class ConfigError(RelevantError):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Error message
            config_path: Path to the config file/key
            context: Additional context
        """
        ctx = context or {}
        if config_path:
            ctx["config_path"] = config_path
        super().__init__(message, context=ctx)


class ConfigValidationError(ConfigError):
    """Raised when a configuration file fails validation.

    Attributes:
        field: Field that failed validation (optional)
        reason: Validation failure reason (optional)
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        reason: str | None = None,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        self.field = field
        self.reason = reason

        if field and reason:
            ctx.update({"field": field, "reason": reason})
            final_message = f"Config validation failed for '{field}': {reason}"
        elif message:
            final_message = message
        else:
            final_message = "Configuration validation failed"

        super().__init__(final_message, config_path=config_path, context=ctx)


# ============================================
# API Errors
# ============================================


class APIError(RelevantError):
    """Base exception for failures talking to the Relevant API."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize APIError.

        Args:
            message: Error message
            endpoint: API endpoint that was called
            context: Additional context
        """
        ctx = context or {}
        if endpoint:
            ctx["endpoint"] = endpoint
        self.endpoint = endpoint
        super().__init__(message, context=ctx)


class NetworkError(APIError):
    """Raised when the request never produced an HTTP response."""


class APIResponseError(APIError):
    """Raised when the API answers with a non-success status.

    Attributes:
        status_code: HTTP status code
        server_message: Message supplied by the server (``msg``/``message``)
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: str | None = None,
        response_body: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize APIResponseError.

        Args:
            message: Error message (server-provided when available)
            status_code: HTTP status code
            endpoint: API endpoint
            response_body: Response body for debugging (optional)
            context: Additional context
        """
        ctx = context or {}
        ctx["status_code"] = status_code
        if response_body:
            ctx["response_body"] = response_body[:500]  # Truncate long responses

        self.status_code = status_code
        self.server_message = message

        super().__init__(message, endpoint=endpoint, context=ctx)

    @property
    def is_server_error(self) -> bool:
        """True for 5xx responses."""
        return self.status_code >= 500


class UnauthorizedError(APIResponseError):
    """Raised on a 401 response.

    The client only reports it; whoever owns navigation decides what
    logging the user out looks like.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        endpoint: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code=401, endpoint=endpoint, context=context)


class MalformedResponseError(APIResponseError):
    """Raised when a success response cannot be read as the expected shape.

    The server gave no message worth showing; callers fall back to their own.
    """


# ============================================
# Client-side Errors
# ============================================


class FormValidationError(RelevantError):
    """Raised when a form fails validation before it is submitted.

    Attributes:
        field_errors: Mapping of field name to inline error message
    """

    def __init__(
        self,
        field_errors: dict[str, str],
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["field_errors"] = field_errors
        self.field_errors = field_errors
        fields = ", ".join(sorted(field_errors))
        super().__init__(f"Invalid form fields: {fields}", context=ctx)


class ContentDecodeError(RelevantError):
    """Raised by the strict content decoder for unusable payloads.

    Attributes:
        payload_type: Python type name of the rejected payload
    """

    def __init__(self, message: str, payload_type: str | None = None) -> None:
        ctx: dict[str, Any] = {}
        if payload_type:
            ctx["payload_type"] = payload_type
        self.payload_type = payload_type
        super().__init__(message, context=ctx)


__all__ = [
    "RelevantError",
    "ConfigError",
    "ConfigValidationError",
    "APIError",
    "NetworkError",
    "APIResponseError",
    "UnauthorizedError",
    "MalformedResponseError",
    "FormValidationError",
    "ContentDecodeError",
]
