"""Observability infrastructure for the Spiris client.

Provides structured logging and request metrics.
"""

from .logger import LogContext, get_logger, log_context, setup_logging
from .metrics import RequestMetrics

__all__ = [
    "LogContext",
    "get_logger",
    "log_context",
    "setup_logging",
    "RequestMetrics",
]
