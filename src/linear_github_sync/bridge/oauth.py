"""OAuth authorization URLs and server-side code exchange for Linear and GitHub."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from linear_github_sync.bridge.constants import GITHUB, LINEAR, TIMEOUTS

logger = logging.getLogger(__name__)

# Scope lists and redirect URIs stay readable in the query string.
_QUERY_SAFE_CHARS = ",:/"


class OAuthExchangeError(RuntimeError):
    """Raised when a provider rejects an authorization code."""


class OAuthNotConfigured(RuntimeError):
    """Raised when a client secret is missing for a token exchange."""


@dataclass(frozen=True, slots=True)
class TokenResponse:
    access_token: str
    token_type: str
    scope: str


def build_url(base: str, params: Mapping[str, str]) -> str:
    """Append ``params`` to ``base`` as a query string, preserving their order."""

    if not params:
        return base
    query = "&".join(
        f"{quote(str(k), safe='')}={quote(str(v), safe=_QUERY_SAFE_CHARS)}"
        for k, v in params.items()
    )
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{query}"


def generate_verification_code() -> str:
    """Random ``state`` value to tie an OAuth callback to the request that started it."""

    return secrets.token_hex(16)


def get_linear_auth_url(
    verification_code: str,
    *,
    redirect_uri: str,
    client_id: str = LINEAR.oauth_id,
) -> str:
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": ",".join(LINEAR.scopes),
        "state": verification_code,
        "response_type": "code",
        "prompt": "consent",
    }
    return build_url(LINEAR.oauth_url, params)


def get_github_auth_url(
    verification_code: str,
    *,
    redirect_uri: str,
    client_id: str = GITHUB.oauth_id,
) -> str:
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": " ".join(GITHUB.scopes),
        "state": verification_code,
    }
    return build_url(GITHUB.oauth_url, params)


def get_linear_token_url() -> str:
    """Linear's personal API key page, scrolled to the keys section."""

    section = "%20".join(LINEAR.token_section_header.split(" "))
    return f"{LINEAR.new_token_url}#:~:text={section}"


def get_github_token_url() -> str:
    """GitHub's new personal access token page, prefilled with our scopes and note."""

    scopes = ",".join(GITHUB.scopes)
    description = "%20".join(GITHUB.token_note.split(" "))
    return f"{GITHUB.new_token_url}?scopes={scopes}&description={description}"


class OAuthTokenExchanger:
    """Trades OAuth authorization codes for access tokens.

    This runs where the client secrets live (the bridge server or the CLI), never
    in the browser.
    """

    def __init__(
        self,
        *,
        linear_client_id: str = LINEAR.oauth_id,
        linear_client_secret: str = "",
        github_client_id: str = GITHUB.oauth_id,
        github_client_secret: str = "",
        session: requests.Session | None = None,
    ) -> None:
        self._linear_client_id = linear_client_id
        self._linear_client_secret = linear_client_secret
        self._github_client_id = github_client_id
        self._github_client_secret = github_client_secret
        self._session = session or requests.Session()

    def exchange_linear_code(self, *, code: str, redirect_uri: str) -> TokenResponse:
        if not self._linear_client_secret:
            raise OAuthNotConfigured("LINEAR_OAUTH_SECRET is required for token exchange")
        if not code.strip():
            raise ValueError("code is required")

        resp = self._session.post(
            LINEAR.token_url,
            data={
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self._linear_client_id,
                "client_secret": self._linear_client_secret,
                "grant_type": "authorization_code",
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=TIMEOUTS.default_seconds,
        )
        return self._parse_token_response(resp, provider="linear")

    def exchange_github_code(self, *, code: str, redirect_uri: str) -> TokenResponse:
        if not self._github_client_secret:
            raise OAuthNotConfigured("GITHUB_OAUTH_SECRET is required for token exchange")
        if not code.strip():
            raise ValueError("code is required")

        resp = self._session.post(
            GITHUB.token_url,
            json={
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self._github_client_id,
                "client_secret": self._github_client_secret,
            },
            headers={"Accept": "application/json"},
            timeout=TIMEOUTS.default_seconds,
        )
        return self._parse_token_response(resp, provider="github")

    @staticmethod
    def _parse_token_response(resp: requests.Response, *, provider: str) -> TokenResponse:
        # Both providers report a bad code with a 200/400 JSON body carrying "error".
        try:
            payload: dict[str, Any] = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise OAuthExchangeError(f"{provider} token endpoint returned a non-JSON body")

        if not isinstance(payload, dict):
            raise OAuthExchangeError(f"{provider} token endpoint returned an unexpected body")

        error = payload.get("error")
        if error:
            description = payload.get("error_description") or error
            logger.warning(
                "OAuth code exchange rejected", extra={"provider": provider, "error": error}
            )
            raise OAuthExchangeError(f"{provider} token exchange failed: {description}")

        resp.raise_for_status()

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token.strip():
            raise OAuthExchangeError(f"{provider} token response is missing access_token")

        token_type = payload.get("token_type")
        scope = payload.get("scope")
        if isinstance(scope, list):
            scope = ",".join(str(s) for s in scope)

        logger.info("OAuth code exchanged", extra={"provider": provider})
        return TokenResponse(
            access_token=access_token,
            token_type=token_type if isinstance(token_type, str) else "bearer",
            scope=scope if isinstance(scope, str) else "",
        )

    def close(self) -> None:
        self._session.close()
