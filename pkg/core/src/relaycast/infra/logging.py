"""
Logging configuration for Relaycast.

This module configures structlog for console or JSON logging across the
application and redacts stream keys and other secrets before rendering.
"""

import logging
import re
import sys
from typing import Any

import structlog

SECRET_KEYS = (
    "stream_key",
    "token",
    "password",
    "secret",
    "api_key",
)

SECRET_PATTERNS = (
    (re.compile(r"://[^:/\s]+:[^@/\s]+@"), "://***:***@"),  # URLs with credentials
    (re.compile(r"(token=)[^&\s]+"), r"\1***"),
    (re.compile(r"(password=)[^&\s]+"), r"\1***"),
)


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        for pattern, replacement in SECRET_PATTERNS:
            value = pattern.sub(replacement, value)
        return value
    if isinstance(value, dict):
        return {k: _redact_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact_value(item) for item in value]
    return value


def redact_secrets(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive information from log events."""
    for key in list(event_dict.keys()):
        if any(secret in key.lower() for secret in SECRET_KEYS):
            event_dict[key] = "***REDACTED***"
        else:
            event_dict[key] = _redact_value(event_dict[key])
    return event_dict


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        fmt: "json" for machine-readable lines, anything else for console output
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            redact_secrets,  # Redact secrets before rendering
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **context: Any) -> structlog.BoundLogger:
    """Get a logger bound with service context."""
    from .settings import settings

    logger = structlog.get_logger(name)
    return logger.bind(service="relaycast", env=settings.env, **context)
