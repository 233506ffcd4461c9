"""OAuth2 authentication for the Spiris API.

Covers the authorization-code flow with PKCE, token refresh, and a small
JSON token file so a CLI session survives restarts.

Usage:
    handler = OAuth2Handler(OAuth2Config(client_id, client_secret, redirect_uri))
    url, state, verifier = handler.authorize_url()
    # ... user approves, redirect carries ?code=...
    token = await handler.exchange_code(code, verifier)
    holder = TokenHolder(token)
"""

from __future__ import annotations

import base64
import hashlib
import json
import os
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import aiohttp

from spiris.config.constants import (
    DEFAULT_AUTH_URL,
    DEFAULT_SCOPES,
    DEFAULT_TOKEN_LIFETIME,
    DEFAULT_TOKEN_URL,
    TOKEN_EXPIRY_BUFFER_SECONDS,
)
from spiris.core.errors import ConfigError, OAuth2Error, TokenExpiredError
from spiris.observability.logger import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AccessToken:
    """Access token with expiration tracking.

    Tokens typically expire after 1 hour; `is_expired()` reports True
    5 minutes early so a request never starts with a token about to lapse.
    """

    token: str
    expires_at: datetime
    refresh_token: str | None = None
    token_type: str = "Bearer"

    @classmethod
    def new(cls, token: str, expires_in: int = DEFAULT_TOKEN_LIFETIME, refresh_token: str | None = None) -> AccessToken:
        """Create a token that expires `expires_in` seconds from now."""
        return cls(
            token=token,
            expires_at=_utcnow() + timedelta(seconds=expires_in),
            refresh_token=refresh_token,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or _utcnow()
        return now + timedelta(seconds=TOKEN_EXPIRY_BUFFER_SECONDS) >= self.expires_at

    def authorization_header(self) -> str:
        return f"{self.token_type} {self.token}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "expires_at": self.expires_at.isoformat(),
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccessToken:
        expires_at = datetime.fromisoformat(data["expires_at"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return cls(
            token=data["token"],
            expires_at=expires_at,
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type", "Bearer"),
        )


class TokenHolder:
    """Owns the current access token for one or more clients.

    Passed explicitly to each client; there is no module-level token state.
    """

    def __init__(self, token: AccessToken | None = None) -> None:
        self._token = token

    def get(self) -> AccessToken:
        if self._token is None:
            raise TokenExpiredError("No access token set")
        return self._token

    def set(self, token: AccessToken) -> None:
        self._token = token

    def is_expired(self) -> bool:
        return self._token is None or self._token.is_expired()

    def authorization_header(self) -> str:
        """Header value for the current token, checked locally for expiry."""
        token = self.get()
        if token.is_expired():
            raise TokenExpiredError()
        return token.authorization_header()

    async def refresh(self, handler: OAuth2Handler) -> AccessToken:
        """Refresh through `handler` and store the new token."""
        current = self.get()
        if not current.refresh_token:
            raise OAuth2Error("No refresh token available; re-authorize")
        token = await handler.refresh_token(current.refresh_token)
        self.set(token)
        return token


@dataclass
class OAuth2Config:
    """OAuth2 client registration from the Visma developer portal."""

    client_id: str
    client_secret: str
    redirect_uri: str
    auth_url: str = DEFAULT_AUTH_URL
    token_url: str = DEFAULT_TOKEN_URL
    scopes: tuple[str, ...] = field(default=DEFAULT_SCOPES)

    def validate(self) -> None:
        if not self.client_id or not self.client_secret:
            raise ConfigError(
                "OAuth2 credentials not configured. "
                "Set SPIRIS_CLIENT_ID and SPIRIS_CLIENT_SECRET environment variables."
            )
        if not self.redirect_uri:
            raise ConfigError("OAuth2 redirect URI is required")


def _pkce_pair() -> tuple[str, str]:
    """Return (verifier, S256 challenge)."""
    verifier = secrets.token_urlsafe(64)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


class OAuth2Handler:
    """Authorization-code flow with PKCE against the Visma identity server."""

    def __init__(self, config: OAuth2Config, session: aiohttp.ClientSession | None = None) -> None:
        config.validate()
        self.config = config
        self._session = session

    def authorize_url(self) -> tuple[str, str, str]:
        """Build the URL the user must visit.

        Returns:
            (authorization_url, csrf_state, pkce_verifier)
        """
        verifier, challenge = _pkce_pair()
        state = secrets.token_urlsafe(16)
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self.config.client_id,
                "redirect_uri": self.config.redirect_uri,
                "scope": " ".join(self.config.scopes),
                "state": state,
                "code_challenge": challenge,
                "code_challenge_method": "S256",
            }
        )
        return f"{self.config.auth_url}?{query}", state, verifier

    async def exchange_code(self, code: str, pkce_verifier: str) -> AccessToken:
        """Exchange an authorization code for an access token."""
        return await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.config.redirect_uri,
                "code_verifier": pkce_verifier,
            },
            action="Token exchange",
        )

    async def refresh_token(self, refresh_token: str) -> AccessToken:
        """Obtain a new access token from a refresh token."""
        return await self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            action="Token refresh",
        )

    async def _token_request(self, form: dict[str, str], *, action: str) -> AccessToken:
        session = self._session or aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=30))
        auth = aiohttp.BasicAuth(self.config.client_id, self.config.client_secret)

        try:
            async with session.post(self.config.token_url, data=form, auth=auth) as resp:
                if resp.status != 200:
                    text = await resp.text()
                    raise OAuth2Error(f"{action} failed: {resp.status} {text}", status_code=resp.status)
                data = await resp.json()
        except aiohttp.ClientError as e:
            raise OAuth2Error(f"{action} failed: network error: {e}") from e
        except ValueError as e:
            raise OAuth2Error(f"{action} failed: response is not valid JSON: {e}") from e
        finally:
            if self._session is None:
                await session.close()

        if not isinstance(data, dict) or "access_token" not in data:
            raise OAuth2Error(f"{action} failed: no access_token in response")

        try:
            expires_in = int(data.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        except (TypeError, ValueError) as e:
            raise OAuth2Error(f"{action} failed: invalid expires_in {data.get('expires_in')!r}") from e

        logger.info(f"{action} succeeded")
        return AccessToken.new(data["access_token"], expires_in, data.get("refresh_token"))


# ==================== Token file ====================


def save_token(path: Path, token: AccessToken) -> None:
    """Persist a token as JSON, readable only by the owner."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(token.to_dict(), indent=2), encoding="utf-8")
    os.chmod(path, 0o600)


def load_token(path: Path) -> AccessToken | None:
    """Load a saved token; None if the file does not exist."""
    if not path.exists():
        return None
    try:
        return AccessToken.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (ValueError, KeyError) as e:
        raise ConfigError(f"Corrupt token file {path}: {e}") from e
