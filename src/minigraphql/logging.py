"""
Structured logging for the GraphQL services (structlog over stdlib logging)
"""

import base64
import logging
import secrets
import sys
import time
from contextvars import ContextVar
from typing import Any, TextIO

import structlog

# Per-request values attached to every event logged while handling a request
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
operation_ctx: ContextVar[str | None] = ContextVar("graphql_operation", default=None)


class RequestContextFilter:
    """structlog processor adding the request id and GraphQL operation name."""

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        _ = logger, method_name

        for key, var in (("request_id", request_id_ctx), ("graphql_operation", operation_ctx)):
            value = var.get()
            if value and key not in event_dict:
                event_dict[key] = value
        return event_dict


def _processors(debug: bool, stream: TextIO) -> list[Any]:
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        RequestContextFilter(),
        structlog.processors.TimeStamper(fmt="ISO", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        # Colors only when a terminal is attached
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(debug: bool = False, stream: TextIO | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        debug: Human-readable console output at DEBUG level. Otherwise JSON lines at INFO.
        stream: Where log lines go (default: stdout). The CLI passes stderr so
            command output stays parseable.
    """
    stream = stream or sys.stdout

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        stream=stream,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=_processors(debug, stream),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger instance (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Generate a compact request ID from a microsecond timestamp and 2 random bytes.

    Format: 14-character URL-safe base64 string.
    """
    timestamp_us = int(time.time() * 1_000_000)
    combined_bytes = timestamp_us.to_bytes(8, byteorder="big") + secrets.token_bytes(2)
    return base64.urlsafe_b64encode(combined_bytes).decode("ascii").rstrip("=")


def set_request_context(request_id: str | None = None, operation: str | None = None) -> str:
    """Set request context variables.

    Args:
        request_id: Request ID to set (generates one if None)
        operation: GraphQL operation name, if known

    Returns:
        The request ID in effect
    """
    request_id = request_id or generate_request_id()
    request_id_ctx.set(request_id)
    if operation is not None:
        operation_ctx.set(operation)
    return request_id


def clear_request_context() -> None:
    request_id_ctx.set(None)
    operation_ctx.set(None)


def get_request_id() -> str | None:
    return request_id_ctx.get()
