"""Structured logging configuration using structlog.

Events are rendered as JSON in production and as coloured console lines
otherwise. Session tokens, passwords and OAuth codes never reach the
output: ``redact_credentials`` masks them before rendering.
"""

import logging
import sys
from collections.abc import Mapping
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from relevant.core.config import Config, get_config

REDACTED = "***"

# Matched case-insensitively against event keys and header names
CREDENTIAL_KEYS = frozenset({"token", "password", "code", "x-auth-token", "authorization"})

# Libraries that log every request URL at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _mask(values: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key: REDACTED if str(key).lower() in CREDENTIAL_KEYS and value else value
        for key, value in values.items()
    }


def redact_credentials(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential values in an event and in any ``headers`` it carries."""
    masked = _mask(event_dict)
    headers = masked.get("headers")
    if isinstance(headers, Mapping):
        masked["headers"] = _mask(headers)
    return masked


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application name and environment to log events."""
    config = get_config()
    event_dict["app"] = config.app_name
    event_dict["env"] = config.app_env
    return event_dict


def build_processors(config: Config) -> list[Processor]:
    """Processor chain for the given environment, renderer last."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        redact_credentials,
    ]

    if config.is_development:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    if config.is_production:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]
    return processors


def setup_logging(config: Config | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        config: Settings to use (default: the process-wide config)

    Example:
        >>> setup_logging()
        >>> get_logger(__name__).info("Dashboard started", location="/feed")
    """
    config = config or get_config()
    level = getattr(logging, config.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    if level > logging.DEBUG:
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=build_processors(config),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, usually ``get_logger(__name__)``."""
    return structlog.get_logger(name)
