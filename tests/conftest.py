"""Pytest configuration and shared fixtures."""

import pytest

from spiris.auth import AccessToken, TokenHolder
from spiris.client import ClientConfig, SpirisClient
from spiris.resilience import RetryPolicy


@pytest.fixture
def token() -> AccessToken:
    return AccessToken.new("test-access-token", 3600, "test-refresh-token")


@pytest.fixture
def token_holder(token) -> TokenHolder:
    return TokenHolder(token)


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Three attempts with negligible delays."""
    return RetryPolicy(max_attempts=3, initial_delay=0.0, max_delay=0.0, max_elapsed=None)


@pytest.fixture
def client(token_holder, fast_policy) -> SpirisClient:
    return SpirisClient(token_holder, ClientConfig(retry_policy=fast_policy))
