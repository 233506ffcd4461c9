"""Core errors and types for the Spiris client."""

from .errors import (
    ApiError,
    ApiErrorResponse,
    AuthError,
    ConfigError,
    ErrorKind,
    FieldError,
    InvalidPageError,
    InvalidRequestError,
    InvalidResponseError,
    NetworkError,
    NotFoundError,
    OAuth2Error,
    RateLimitError,
    SpirisError,
    TokenExpiredError,
    UnsupportedOperationError,
    classify,
    is_retryable,
)
from .types import Page, PageFetcher, PageRequest, StreamCursor

__all__ = [
    # Errors
    "SpirisError",
    "NetworkError",
    "ApiError",
    "ApiErrorResponse",
    "FieldError",
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
    # Classification
    "ErrorKind",
    "classify",
    "is_retryable",
    # Types
    "Page",
    "PageFetcher",
    "PageRequest",
    "StreamCursor",
]
