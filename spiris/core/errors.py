"""Error hierarchy and failure classification for the Spiris client.

All client errors inherit from SpirisError.
Use `classify()` (or the `kind` / `is_retryable` properties) to decide
whether a failure may be retried.
"""

from __future__ import annotations

import asyncio
import json
import socket
import ssl
from enum import Enum
from typing import Any

import aiohttp
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class ErrorKind(str, Enum):
    """Classification result for a failed operation."""

    TRANSIENT_NETWORK = "transient_network"
    TRANSIENT_RATE_LIMITED = "transient_rate_limited"
    TRANSIENT_SERVER = "transient_server"
    FATAL_CLIENT = "fatal_client"
    FATAL_AUTH = "fatal_auth"
    FATAL_OTHER = "fatal_other"

    @property
    def is_retryable(self) -> bool:
        return self in _TRANSIENT_KINDS


_TRANSIENT_KINDS = frozenset(
    {
        ErrorKind.TRANSIENT_NETWORK,
        ErrorKind.TRANSIENT_RATE_LIMITED,
        ErrorKind.TRANSIENT_SERVER,
    }
)


# =============================================================================
# API error body
# =============================================================================


class FieldError(BaseModel):
    """A field-level validation error returned by the API."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    field: str = ""
    message: str = ""

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ApiErrorResponse(BaseModel):
    """Parsed error body, e.g. ``{"ErrorCode": ..., "Message": ..., "ValidationErrors": [...]}``."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="ignore")

    error_code: int | str | None = None
    message: str = ""
    validation_errors: list[FieldError] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, message: str) -> ApiErrorResponse:
        """Fallback for non-JSON error bodies."""
        return cls(message=message)

    @classmethod
    def parse(cls, raw_body: str) -> ApiErrorResponse:
        try:
            data = json.loads(raw_body)
        except (ValueError, TypeError):
            return cls.from_raw(raw_body)
        if not isinstance(data, dict):
            return cls.from_raw(raw_body)
        try:
            return cls.model_validate(data)
        except ValueError:
            return cls.from_raw(raw_body)

    @property
    def has_validation_errors(self) -> bool:
        return bool(self.validation_errors)

    def validation_error_for(self, field: str) -> FieldError | None:
        for err in self.validation_errors:
            if err.field == field:
                return err
        return None

    def __str__(self) -> str:
        if not self.validation_errors:
            return self.message
        details = ", ".join(str(e) for e in self.validation_errors)
        return f"{self.message} ({details})"


# =============================================================================
# Exceptions
# =============================================================================


class SpirisError(Exception):
    """Base error for all Spiris client errors.

    Attributes:
        message: Error description
        status_code: HTTP status code (if the error came from a response)
    """

    status_code: int | None = None

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    @property
    def kind(self) -> ErrorKind:
        return classify(self)

    @property
    def is_retryable(self) -> bool:
        """Whether this error can be retried."""
        return self.kind.is_retryable

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "status_code": self.status_code,
            "kind": self.kind.value,
            "is_retryable": self.is_retryable,
        }


class NetworkError(SpirisError):
    """Transport-level failure: connection refused, timeout, DNS, TLS.

    This is retryable - might be a temporary network issue.
    """

    def __init__(self, message: str = "Network error") -> None:
        super().__init__(message)


class ApiError(SpirisError):
    """The API answered with a non-success status.

    Carries the parsed error body and the raw body for debugging.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int,
        response: ApiErrorResponse | None = None,
        raw_body: str = "",
    ) -> None:
        self.response = response or ApiErrorResponse.from_raw(raw_body)
        self.raw_body = raw_body
        super().__init__(
            message or f"API error ({status_code}): {self.response}",
            status_code=status_code,
        )

    @classmethod
    def from_response(
        cls,
        status_code: int,
        raw_body: str,
        *,
        retry_after: float | None = None,
    ) -> ApiError:
        """Build the most specific ApiError subclass for a status code."""
        response = ApiErrorResponse.parse(raw_body)
        if status_code == 429:
            return RateLimitError(
                status_code=status_code,
                response=response,
                raw_body=raw_body,
                retry_after=retry_after,
            )
        error_cls: type[ApiError]
        if status_code in (401, 403):
            error_cls = AuthError
        elif status_code == 404:
            error_cls = NotFoundError
        elif status_code == 400:
            error_cls = InvalidRequestError
        else:
            error_cls = ApiError
        return error_cls(status_code=status_code, response=response, raw_body=raw_body)

    @property
    def validation_errors(self) -> list[FieldError]:
        return self.response.validation_errors

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["error_code"] = self.response.error_code
        d["validation_errors"] = [e.model_dump() for e in self.validation_errors]
        return d


class RateLimitError(ApiError):
    """Rate limit exceeded (HTTP 429).

    `retry_after` holds the server's Retry-After hint in seconds, if any.
    """

    def __init__(self, message: str | None = None, *, retry_after: float | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("status_code", 429)
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["retry_after"] = self.retry_after
        return d


class AuthError(ApiError):
    """Unauthorized (401) or forbidden (403)."""


class NotFoundError(ApiError):
    """Resource not found (404)."""


class InvalidRequestError(ApiError):
    """Bad request (400), usually with field validation errors."""


class TokenExpiredError(SpirisError):
    """The access token is expired; detected locally before any request.

    NOT retryable - the caller must refresh credentials out of band.
    """

    def __init__(self, message: str = "Access token has expired") -> None:
        super().__init__(message)


class OAuth2Error(SpirisError):
    """Token exchange or refresh failed."""


class ConfigError(SpirisError):
    """Invalid client or policy configuration."""


class UnsupportedOperationError(SpirisError):
    """The endpoint does not support the requested operation."""


class InvalidPageError(SpirisError):
    """A page violated its invariants (e.g. more items than the page size)."""


class InvalidResponseError(SpirisError):
    """A success response whose body could not be decoded as JSON."""


# =============================================================================
# Classification
# =============================================================================

_TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    NetworkError,
    aiohttp.ClientConnectionError,
    aiohttp.ClientPayloadError,
    asyncio.TimeoutError,
    TimeoutError,
    ConnectionError,
    socket.gaierror,
    ssl.SSLError,
)


def _status_of(error: BaseException) -> int | None:
    if isinstance(error, SpirisError):
        return error.status_code
    if isinstance(error, aiohttp.ClientResponseError):
        return error.status
    return None


def classify(error: BaseException) -> ErrorKind:
    """Classify a failure. Pure: no side effects, no I/O.

    Rules are evaluated in order, first match wins:
      1. transport failure -> TRANSIENT_NETWORK
      2. 429 -> TRANSIENT_RATE_LIMITED
      3. 5xx -> TRANSIENT_SERVER
      4. 401/403 -> FATAL_AUTH
      5. other 4xx -> FATAL_CLIENT
      6. locally detected token expiry -> FATAL_AUTH
      7. anything else -> FATAL_OTHER
    """
    if isinstance(error, _TRANSPORT_ERRORS):
        return ErrorKind.TRANSIENT_NETWORK

    status = _status_of(error)
    if status is not None:
        if status == 429:
            return ErrorKind.TRANSIENT_RATE_LIMITED
        if 500 <= status <= 599:
            return ErrorKind.TRANSIENT_SERVER
        if status in (401, 403):
            return ErrorKind.FATAL_AUTH
        if 400 <= status <= 499:
            return ErrorKind.FATAL_CLIENT

    if isinstance(error, TokenExpiredError):
        return ErrorKind.FATAL_AUTH

    return ErrorKind.FATAL_OTHER


def is_retryable(error: BaseException) -> bool:
    """True iff `error` classifies as one of the transient kinds."""
    return classify(error).is_retryable
