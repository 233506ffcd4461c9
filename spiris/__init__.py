"""Async client for the Spiris Bokföring och Fakturering (Visma eAccounting) API."""

from spiris.auth import AccessToken, OAuth2Config, OAuth2Handler, TokenHolder, load_token, save_token
from spiris.client import ClientConfig, SpirisClient
from spiris.core import (
    ApiError,
    AuthError,
    ConfigError,
    ErrorKind,
    InvalidPageError,
    InvalidRequestError,
    InvalidResponseError,
    NetworkError,
    NotFoundError,
    OAuth2Error,
    Page,
    RateLimitError,
    SpirisError,
    TokenExpiredError,
    UnsupportedOperationError,
    classify,
    is_retryable,
)
from spiris.endpoints import Capability, Resource, ResourceEndpoint
from spiris.middleware import (
    HeadersMiddleware,
    LoggingMiddleware,
    MetricsMiddleware,
    Middleware,
    MiddlewareStack,
    RequestContext,
    ResponseContext,
)
from spiris.pagination import PaginationStream, paginate
from spiris.resilience import RateLimiter, RetryExecutor, RetryPolicy, retry_request

__version__ = "0.1.0"

__all__ = [
    # Client
    "SpirisClient",
    "ClientConfig",
    "Resource",
    "ResourceEndpoint",
    "Capability",
    # Auth
    "AccessToken",
    "TokenHolder",
    "OAuth2Config",
    "OAuth2Handler",
    "load_token",
    "save_token",
    # Pagination & resilience
    "Page",
    "PaginationStream",
    "paginate",
    "RetryPolicy",
    "RetryExecutor",
    "retry_request",
    "RateLimiter",
    # Middleware
    "Middleware",
    "MiddlewareStack",
    "RequestContext",
    "ResponseContext",
    "LoggingMiddleware",
    "HeadersMiddleware",
    "MetricsMiddleware",
    # Errors
    "SpirisError",
    "NetworkError",
    "ApiError",
    "RateLimitError",
    "AuthError",
    "NotFoundError",
    "InvalidRequestError",
    "TokenExpiredError",
    "OAuth2Error",
    "ConfigError",
    "UnsupportedOperationError",
    "InvalidPageError",
    "InvalidResponseError",
    "ErrorKind",
    "classify",
    "is_retryable",
]
