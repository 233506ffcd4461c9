"""Request/response middleware.

Middleware sees every HTTP exchange the client makes: `on_request` runs
before the request is sent (and may add headers or raise to abort it),
`on_response` runs once the exchange has finished, successfully or not.

Usage:
    stack = MiddlewareStack()
    stack.push(HeadersMiddleware({"X-Correlation-Id": "abc"}))
    stack.push(LoggingMiddleware())

    metrics = MetricsMiddleware()
    stack.push(metrics)
    ...
    print(metrics.metrics.to_summary())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from spiris.observability.logger import get_logger
from spiris.observability.metrics import RequestMetrics

logger = get_logger(__name__)


@dataclass
class RequestContext:
    """Outgoing request as seen by middleware."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    # Carried through to the matching ResponseContext
    extensions: dict[str, Any] = field(default_factory=dict)

    def add_header(self, key: str, value: str) -> None:
        self.headers[key] = value


@dataclass
class ResponseContext:
    """Finished exchange. `status` is 0 when no response was received."""

    method: str
    url: str
    status: int
    duration: float  # seconds
    error: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.error is None and 200 <= self.status < 300


class Middleware:
    """Base class; override either hook."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def on_request(self, ctx: RequestContext) -> None:
        """Called before the request is sent. Raise to abort the request."""

    def on_response(self, ctx: ResponseContext) -> None:
        """Called after the exchange completes."""


class MiddlewareStack:
    """Ordered middleware chain.

    Requests pass through in insertion order, responses in reverse order.
    """

    def __init__(self, middleware: list[Middleware] | None = None) -> None:
        self._middleware: list[Middleware] = list(middleware or [])

    def push(self, middleware: Middleware) -> MiddlewareStack:
        self._middleware.append(middleware)
        return self

    def on_request(self, ctx: RequestContext) -> None:
        for mw in self._middleware:
            mw.on_request(ctx)

    def on_response(self, ctx: ResponseContext) -> None:
        for mw in reversed(self._middleware):
            mw.on_response(ctx)

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)

    def __repr__(self) -> str:
        names = ", ".join(mw.name for mw in self._middleware)
        return f"MiddlewareStack([{names}])"


class LoggingMiddleware(Middleware):
    """Logs each request at debug and each response at debug/warning."""

    def __init__(self, log_bodies: bool = False) -> None:
        self.log_bodies = log_bodies

    def on_request(self, ctx: RequestContext) -> None:
        extra: dict[str, Any] = {"method": ctx.method, "url": ctx.url}
        if self.log_bodies and ctx.body:
            extra["body"] = ctx.body
        logger.debug(f"→ {ctx.method} {ctx.url}", extra=extra)

    def on_response(self, ctx: ResponseContext) -> None:
        extra = {
            "method": ctx.method,
            "url": ctx.url,
            "status": ctx.status,
            "duration_ms": round(ctx.duration * 1000, 1),
        }
        if ctx.success:
            logger.debug(f"← {ctx.status} {ctx.method} {ctx.url}", extra=extra)
        elif ctx.error:
            logger.warning(f"✗ {ctx.method} {ctx.url}: {ctx.error}", extra=extra)
        else:
            logger.warning(f"← {ctx.status} {ctx.method} {ctx.url}", extra=extra)


class HeadersMiddleware(Middleware):
    """Adds fixed headers to every request."""

    def __init__(self, headers: dict[str, str] | None = None) -> None:
        self.headers = dict(headers or {})

    def add(self, key: str, value: str) -> HeadersMiddleware:
        self.headers[key] = value
        return self

    def on_request(self, ctx: RequestContext) -> None:
        for key, value in self.headers.items():
            ctx.add_header(key, value)


class MetricsMiddleware(Middleware):
    """Collects request counts and timing into a RequestMetrics."""

    def __init__(self, metrics: RequestMetrics | None = None) -> None:
        self.metrics = metrics or RequestMetrics()

    def on_response(self, ctx: ResponseContext) -> None:
        self.metrics.record(ctx.status, ctx.duration, ctx.error)

    def reset(self) -> None:
        self.metrics.reset()

    def to_dict(self) -> dict[str, Any]:
        return self.metrics.to_dict()
