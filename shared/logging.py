"""
Centralized structured logging for the EventHub API.

Provides:
- setup_logging(): configure stdlib logging + structlog once at startup
- get_logger(): get a structlog BoundLogger for a module
- log_with_context(): bind request/user context to a logger

Production renders JSON lines, development a colored console. Secrets
(passwords, tokens, OTP codes) are redacted by a processor before rendering
so a careless ``log.info(..., password=...)`` never leaks them.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "password",
    "new_password",
    "password_hash",
    "otp",
    "otp_code",
    "token",
    "access_token",
    "refresh_token",
    "authorization",
    "cookie",
    "secret",
}

_SENSITIVE_FRAGMENTS = ("password", "token", "secret", "otp_code")
_STRUCTURAL_KEYS = {"level", "event", "timestamp", "logger"}


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format UTC timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in _STRUCTURAL_KEYS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            fragment in lowered for fragment in _SENSITIVE_FRAGMENTS
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str = "console") -> None:
    """Configure structlog processors for JSON (production) or console output."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str = "INFO") -> None:
    """Route stdlib logging to stdout and quiet noisy third-party loggers."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """
    Initialize logging for the application.

    Called once from ``create_app()`` with values from ``LoggingSettings``.
    """
    configure_stdlib_logging(log_level)
    configure_structlog(log_format)

    structlog.get_logger(__name__).info(
        "logging_initialized", log_level=log_level, log_format=log_format
    )


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("login_success", user_id="123")
    """
    return structlog.get_logger(name)


def log_with_context(logger: BoundLogger, **context) -> BoundLogger:
    """Bind context (user_id, request_id, ...) to all subsequent log calls."""
    return logger.bind(**context)
