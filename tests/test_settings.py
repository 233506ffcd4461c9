"""Tests for spiris/config/settings.py."""

import os

import pytest
from pydantic import ValidationError

from spiris.config.constants import DEFAULT_BASE_URL, DEFAULT_TOKEN_URL
from spiris.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop SPIRIS_* variables leaking in from the environment."""
    for key in list(os.environ):
        if key.startswith("SPIRIS_"):
            monkeypatch.delenv(key)


def make_settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestSettings:
    """Tests for defaults and environment loading."""

    def test_defaults(self):
        settings = make_settings()
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.token_url == DEFAULT_TOKEN_URL
        assert settings.max_attempts == 3
        assert settings.page_size == 50
        assert settings.has_oauth is False

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SPIRIS_CLIENT_ID", "cid")
        monkeypatch.setenv("SPIRIS_CLIENT_SECRET", "secret")
        monkeypatch.setenv("SPIRIS_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("SPIRIS_PAGE_SIZE", "200")

        settings = make_settings()

        assert settings.has_oauth is True
        assert settings.max_attempts == 5
        assert settings.page_size == 200

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SPIRIS_BASE_URL=https://sandbox.example/v2/\n")

        assert Settings(_env_file=env_file).base_url == "https://sandbox.example/v2/"

    @pytest.mark.parametrize(
        "kwargs",
        [{"page_size": 0}, {"page_size": 501}, {"max_attempts": 0}, {"backoff_multiplier": 0.5}],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            make_settings(**kwargs)


class TestBuilders:
    """Tests for retry_policy(), oauth2_config() and client_config()."""

    def test_retry_policy(self):
        policy = make_settings(max_attempts=4, initial_delay=0.1, max_delay=2.0, max_elapsed=None).retry_policy()
        assert policy.max_attempts == 4
        assert policy.initial_delay == 0.1
        assert policy.max_delay == 2.0
        assert policy.max_elapsed is None

    def test_oauth2_config(self):
        config = make_settings(client_id="cid", client_secret="secret").oauth2_config()
        assert config.client_id == "cid"
        assert config.redirect_uri == "http://localhost:8080/callback"
        assert config.token_url == DEFAULT_TOKEN_URL

    def test_client_config(self):
        config = make_settings(request_timeout=10, requests_per_minute=120, burst_size=4).client_config()
        assert config.timeout_seconds == 10
        assert config.rate_limiter.rate == pytest.approx(2.0)
        assert config.rate_limiter.burst == 4
        assert config.retry_policy.max_attempts == 3
