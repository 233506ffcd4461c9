"""Structured logger for the Spiris client.

Provides context-aware logging with optional JSON formatting.

Usage:
    from spiris.observability import get_logger, log_context

    logger = get_logger(__name__)

    with log_context(resource="customers", page=3):
        logger.info("Fetching page", extra={"page_size": 50})
        # Output: {"timestamp": "...", "resource": "customers", "page": 3, "message": "...", "page_size": 50}
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "spiris"


@dataclass(frozen=True)
class LogContext:
    """Context for structured logging.

    Attributes are automatically included in all log messages
    within this context.
    """

    resource: str | None = None
    page: int | None = None
    attempt: int | None = None
    request_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


_log_context: contextvars.ContextVar[LogContext] = contextvars.ContextVar(
    "spiris_log_context",
    default=LogContext(),
)

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class _ContextManager:
    """Context manager for setting log context."""

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.token: contextvars.Token[LogContext] | None = None

    def __enter__(self) -> LogContext:
        # Merge with the enclosing context
        new_context = replace(_log_context.get(), **self.kwargs)
        self.token = _log_context.set(new_context)
        return new_context

    def __exit__(self, *args: Any) -> None:
        if self.token is not None:
            _log_context.reset(self.token)


def log_context(**kwargs: Any) -> _ContextManager:
    """Create a context manager for setting log context.

    Args:
        **kwargs: Context fields to set (resource, page, attempt, request_id)

    Example:
        with log_context(resource="invoices"):
            logger.info("Streaming invoices")
    """
    return _ContextManager(**kwargs)


def current_context() -> LogContext:
    return _log_context.get()


class StructuredFormatter(logging.Formatter):
    """JSON formatter with context support."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_log_context.get().to_dict())
        entry.update(_extras(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


class PrettyFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        ctx = _log_context.get()
        color = self.COLORS.get(record.levelname, "")

        prefix_parts = []
        if ctx.resource:
            prefix_parts.append(f"[{ctx.resource}]")
        if ctx.page is not None:
            prefix_parts.append(f"[page {ctx.page}]")
        if ctx.request_id:
            prefix_parts.append(f"[{ctx.request_id}]")
        prefix = " ".join(prefix_parts)
        if prefix:
            prefix += " "

        timestamp = datetime.now().strftime("%H:%M:%S")
        level = record.levelname[:4]
        extras = [f"{k}={v}" for k, v in _extras(record).items()]
        extra_str = " | " + ", ".join(extras) if extras else ""

        formatted = f"{timestamp} {color}{level}{self.RESET} {prefix}{record.getMessage()}{extra_str}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


_logging_configured = False


def setup_logging(
    level: int = logging.WARNING,
    json_format: bool = False,
    quiet: bool = False,
    handler: logging.Handler | None = None,
    force: bool = False,
) -> None:
    """Set up logging for the client.

    Args:
        level: Logging level (default: WARNING, the client is a library)
        json_format: Use JSON format (default: False, use pretty format)
        quiet: Suppress all output except errors (default: False)
        handler: Use this handler instead of a stderr stream handler
        force: Reconfigure even if logging was already set up
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter() if json_format else PrettyFormatter())
    handler.setLevel(logging.ERROR if quiet else level)
    root.addHandler(handler)

    # Suppress noisy loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module under the ``spiris`` namespace.

    Args:
        name: Module name (usually __name__)
    """
    setup_logging()

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
