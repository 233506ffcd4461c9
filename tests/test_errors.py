"""Tests for spiris/core/errors.py.

Classification is pure, so these tests need no mocking.
"""

import asyncio
import socket
import ssl

import aiohttp
import pytest

from spiris.core.errors import (
    ApiError,
    ApiErrorResponse,
    AuthError,
    ConfigError,
    ErrorKind,
    InvalidPageError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    TokenExpiredError,
    classify,
    is_retryable,
)

from .fixtures.spiris_responses import VALIDATION_ERROR_BODY


class TestErrorKind:
    """Tests for ErrorKind.is_retryable."""

    @pytest.mark.parametrize(
        "kind",
        [ErrorKind.TRANSIENT_NETWORK, ErrorKind.TRANSIENT_RATE_LIMITED, ErrorKind.TRANSIENT_SERVER],
    )
    def test_transient_kinds_retryable(self, kind):
        assert kind.is_retryable is True

    @pytest.mark.parametrize(
        "kind",
        [ErrorKind.FATAL_CLIENT, ErrorKind.FATAL_AUTH, ErrorKind.FATAL_OTHER],
    )
    def test_fatal_kinds_not_retryable(self, kind):
        assert kind.is_retryable is False


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        "error",
        [
            NetworkError("connection reset"),
            asyncio.TimeoutError(),
            TimeoutError(),
            ConnectionRefusedError(),
            socket.gaierror("name resolution failed"),
            ssl.SSLError("handshake failed"),
            aiohttp.ServerDisconnectedError(),
        ],
    )
    def test_transport_failures_are_network(self, error):
        assert classify(error) == ErrorKind.TRANSIENT_NETWORK

    def test_429_rate_limited(self):
        assert classify(ApiError.from_response(429, "")) == ErrorKind.TRANSIENT_RATE_LIMITED

    @pytest.mark.parametrize("status", [500, 502, 503, 504, 599])
    def test_5xx_server(self, status):
        assert classify(ApiError.from_response(status, "")) == ErrorKind.TRANSIENT_SERVER

    @pytest.mark.parametrize("status", [401, 403])
    def test_401_403_auth(self, status):
        assert classify(ApiError.from_response(status, "")) == ErrorKind.FATAL_AUTH

    @pytest.mark.parametrize("status", [400, 404, 409, 422])
    def test_other_4xx_client(self, status):
        assert classify(ApiError.from_response(status, "")) == ErrorKind.FATAL_CLIENT

    def test_client_response_error_status_used(self):
        """aiohttp.ClientResponseError status is honoured."""
        error = aiohttp.ClientResponseError(request_info=None, history=(), status=503)
        assert classify(error) == ErrorKind.TRANSIENT_SERVER

    def test_token_expired_is_fatal_auth(self):
        assert classify(TokenExpiredError()) == ErrorKind.FATAL_AUTH

    @pytest.mark.parametrize("error", [ValueError("bad json"), InvalidPageError("too many items"), ConfigError("x")])
    def test_everything_else_fatal_other(self, error):
        assert classify(error) == ErrorKind.FATAL_OTHER

    def test_is_retryable_helper(self):
        assert is_retryable(ApiError.from_response(503, "")) is True
        assert is_retryable(ApiError.from_response(404, "")) is False


class TestApiErrorFromResponse:
    """Tests for ApiError.from_response() subclass selection."""

    @pytest.mark.parametrize(
        ("status", "error_cls"),
        [
            (400, InvalidRequestError),
            (401, AuthError),
            (403, AuthError),
            (404, NotFoundError),
            (429, RateLimitError),
            (500, ApiError),
        ],
    )
    def test_subclass_by_status(self, status, error_cls):
        error = ApiError.from_response(status, "")
        assert type(error) is error_cls
        assert error.status_code == status

    def test_retry_after_kept(self):
        error = ApiError.from_response(429, "", retry_after=30.0)
        assert isinstance(error, RateLimitError)
        assert error.retry_after == 30.0
        assert error.to_dict()["retry_after"] == 30.0

    def test_validation_errors_parsed(self):
        error = ApiError.from_response(400, VALIDATION_ERROR_BODY)

        assert error.response.message == "Validation failed"
        assert len(error.validation_errors) == 2
        assert error.response.validation_error_for("Email").message == "Invalid email"
        assert "Name: Name is required" in str(error)

    def test_raw_text_body_fallback(self):
        error = ApiError.from_response(502, "<html>Bad Gateway</html>")
        assert error.response.message == "<html>Bad Gateway</html>"
        assert error.raw_body == "<html>Bad Gateway</html>"

    def test_to_dict(self):
        d = ApiError.from_response(503, "").to_dict()
        assert d["error_type"] == "ApiError"
        assert d["status_code"] == 503
        assert d["kind"] == "transient_server"
        assert d["is_retryable"] is True


class TestApiErrorResponse:
    """Tests for ApiErrorResponse rendering."""

    def test_str_without_validation_errors(self):
        assert str(ApiErrorResponse(message="Not found")) == "Not found"

    def test_str_with_validation_errors(self):
        response = ApiErrorResponse.parse(VALIDATION_ERROR_BODY)
        assert str(response) == "Validation failed (Name: Name is required, Email: Invalid email)"
        assert response.has_validation_errors is True

    def test_non_object_json(self):
        response = ApiErrorResponse.parse("[1, 2]")
        assert response.message == "[1, 2]"
