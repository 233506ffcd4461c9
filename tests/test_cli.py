"""Tests for spiris/cli/main.py.

Commands run through typer's CliRunner; settings point at a temporary
token file and endpoint methods are patched, so nothing touches the network.
"""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from spiris.auth import AccessToken, load_token, save_token
from spiris.cli.main import app
from spiris.config.settings import Settings
from spiris.core.errors import NotFoundError, RateLimitError
from spiris.core.types import Page
from spiris.endpoints import ResourceEndpoint
from spiris.models import Customer

runner = CliRunner()


@pytest.fixture
def settings(tmp_path):
    settings = Settings(
        _env_file=None,
        client_id="cid",
        client_secret="secret",
        token_file=tmp_path / "token.json",
    )
    with patch("spiris.cli.main.get_settings", return_value=settings):
        yield settings


@pytest.fixture
def logged_in(settings):
    save_token(settings.token_file, AccessToken.new("cli-token", 3600, "cli-refresh"))
    return settings


def json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


def customers_page(*names: str) -> Page:
    items = [Customer(id=f"c{i}", name=name) for i, name in enumerate(names, 1)]
    return Page(items=items, current_page_index=0, page_size=50, total_item_count=len(items))


class TestResources:
    def test_lists_declared_resources(self):
        result = runner.invoke(app, ["resources"])

        assert result.exit_code == 0
        assert "customers" in result.output
        assert "vat_codes" in result.output


class TestAuthCommands:
    """Tests for auth-url, exchange and refresh."""

    def test_auth_url(self, settings):
        result = runner.invoke(app, ["auth-url"])

        assert result.exit_code == 0
        assert settings.auth_url in result.output
        assert "code_challenge=" in result.output

    def test_auth_url_without_credentials(self, tmp_path):
        bare = Settings(_env_file=None, client_id=None, client_secret=None, token_file=tmp_path / "t.json")
        with patch("spiris.cli.main.get_settings", return_value=bare):
            result = runner.invoke(app, ["auth-url"])

        assert result.exit_code == 1

    def test_exchange_saves_token(self, settings):
        token = AccessToken.new("fresh", 3600, "refresh")

        with patch("spiris.cli.main.OAuth2Handler.exchange_code", new=AsyncMock(return_value=token)) as mock_exchange:
            result = runner.invoke(app, ["exchange", "the-code", "--verifier", "the-verifier"])

        assert result.exit_code == 0
        mock_exchange.assert_awaited_once_with("the-code", "the-verifier")
        assert load_token(settings.token_file) == token

    def test_refresh_without_saved_token(self, settings):
        result = runner.invoke(app, ["refresh"])

        assert result.exit_code == 1
        assert "No saved token" in result.output

    def test_refresh_replaces_token(self, logged_in):
        new_token = AccessToken.new("renewed", 3600, "next-refresh")

        with patch("spiris.cli.main.OAuth2Handler.refresh_token", new=AsyncMock(return_value=new_token)):
            result = runner.invoke(app, ["refresh"])

        assert result.exit_code == 0
        assert load_token(logged_in.token_file).token == "renewed"


class TestListCommand:
    """Tests for `spiris list`."""

    def test_requires_token(self, settings):
        result = runner.invoke(app, ["list", "customers"])

        assert result.exit_code == 1
        assert "Not authenticated" in result.output

    def test_expired_token(self, settings):
        expired = AccessToken("old", expires_at=datetime.now(timezone.utc) - timedelta(hours=1))
        save_token(settings.token_file, expired)

        result = runner.invoke(app, ["list", "customers"])

        assert result.exit_code == 1
        assert "expired" in result.output

    def test_single_page_as_json_lines(self, logged_in):
        mock_list = AsyncMock(return_value=customers_page("Acme AB", "Beta AB"))

        with patch.object(ResourceEndpoint, "list", new=mock_list):
            result = runner.invoke(app, ["list", "customers", "--page-size", "10"])

        assert result.exit_code == 0
        assert json_lines(result.output) == [{"Id": "c1", "Name": "Acme AB"}, {"Id": "c2", "Name": "Beta AB"}]
        mock_list.assert_awaited_once_with(page=0, page_size=10)

    def test_limit_truncates_page(self, logged_in):
        with patch.object(ResourceEndpoint, "list", new=AsyncMock(return_value=customers_page("A", "B", "C"))):
            result = runner.invoke(app, ["list", "customers", "--limit", "2", "-q"])

        assert result.exit_code == 0
        assert len(json_lines(result.output)) == 2

    def test_all_pages_streamed(self, logged_in):
        pages = [
            Page(items=[Customer(id="c1")], current_page_index=0, page_size=1, has_next_page=True),
            Page(items=[Customer(id="c2")], current_page_index=1, page_size=1, has_next_page=False),
        ]

        with patch.object(ResourceEndpoint, "fetch_page", new=AsyncMock(side_effect=pages)):
            result = runner.invoke(app, ["list", "customers", "--all", "--page-size", "1"])

        assert result.exit_code == 0
        assert [item["Id"] for item in json_lines(result.output)] == ["c1", "c2"]

    def test_hyphenated_resource_name(self, logged_in):
        mock_list = AsyncMock(return_value=Page(items=[], current_page_index=0, page_size=50))

        with patch.object(ResourceEndpoint, "list", new=mock_list):
            result = runner.invoke(app, ["list", "vat-codes"])

        assert result.exit_code == 0
        mock_list.assert_awaited_once()

    def test_unknown_resource(self, logged_in):
        result = runner.invoke(app, ["list", "widgets"])

        assert result.exit_code == 1
        assert "Unknown resource" in result.output

    def test_rate_limit_exit_code(self, logged_in):
        with patch.object(ResourceEndpoint, "list", new=AsyncMock(side_effect=RateLimitError(retry_after=30))):
            result = runner.invoke(app, ["list", "customers"])

        assert result.exit_code == 2

    def test_api_error_exit_code(self, logged_in):
        error = NotFoundError.from_response(404, "")
        with patch.object(ResourceEndpoint, "list", new=AsyncMock(side_effect=error)):
            result = runner.invoke(app, ["list", "customers"])

        assert result.exit_code == 1


class TestGetCommand:
    def test_prints_item(self, logged_in):
        mock_get = AsyncMock(return_value=Customer(id="c1", name="Acme AB"))

        with patch.object(ResourceEndpoint, "get", new=mock_get):
            result = runner.invoke(app, ["get", "customers", "c1"])

        assert result.exit_code == 0
        assert json_lines(result.output) == [{"Id": "c1", "Name": "Acme AB"}]
        mock_get.assert_awaited_once_with("c1")
