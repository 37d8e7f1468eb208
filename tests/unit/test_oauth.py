"""Unit tests for OAuth URLs and code exchange (mocked HTTP)."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import Mock

import pytest

from linear_github_sync.bridge.oauth import (
    OAuthExchangeError,
    OAuthNotConfigured,
    OAuthTokenExchanger,
    build_url,
    generate_verification_code,
    get_github_auth_url,
    get_github_token_url,
    get_linear_auth_url,
    get_linear_token_url,
)


def test_build_url_keeps_param_order_and_encodes_values() -> None:
    url = build_url("https://x.org/auth", {"b": "1", "a": "two words", "scope": "a,b:c"})

    assert url == "https://x.org/auth?b=1&a=two%20words&scope=a,b:c"


def test_build_url_appends_to_existing_query() -> None:
    assert build_url("https://x.org/a?x=1", {"y": "2"}) == "https://x.org/a?x=1&y=2"
    assert build_url("https://x.org/a", {}) == "https://x.org/a"


def test_linear_auth_url() -> None:
    url = get_linear_auth_url("abc123", redirect_uri="https://synclinear.com")

    assert url == (
        "https://linear.app/oauth/authorize"
        "?client_id=de24196afa78e6f3f99875b753a3ae29"
        "&redirect_uri=https://synclinear.com"
        "&scope=write"
        "&state=abc123"
        "&response_type=code"
        "&prompt=consent"
    )


def test_github_auth_url_joins_scopes_with_spaces() -> None:
    url = get_github_auth_url("xyz", redirect_uri="https://synclinear.com", client_id="my-app")

    assert url == (
        "https://github.com/login/oauth/authorize"
        "?client_id=my-app"
        "&redirect_uri=https://synclinear.com"
        "&scope=repo%20write:repo_hook%20read:user%20user:email"
        "&state=xyz"
    )


def test_token_urls() -> None:
    assert get_linear_token_url() == (
        "https://linear.app/settings/api#:~:text=Personal%20API%20keys"
    )
    assert get_github_token_url() == (
        "https://github.com/settings/tokens/new"
        "?scopes=repo,write:repo_hook,read:user,user:email"
        "&description=Linear-GitHub%20Sync"
    )


def test_verification_codes_are_random_hex() -> None:
    code = generate_verification_code()

    assert len(code) == 32
    int(code, 16)
    assert generate_verification_code() != code


def _exchanger(session: Mock) -> OAuthTokenExchanger:
    return OAuthTokenExchanger(
        linear_client_id="lin-id",
        linear_client_secret="lin-secret",
        github_client_id="gh-id",
        github_client_secret="gh-secret",
        session=session,
    )


def test_exchange_linear_code_posts_form(session: Mock, response: Callable[..., Mock]) -> None:
    session.post.return_value = response(
        {"access_token": "lin-token", "token_type": "Bearer", "scope": ["write"]}
    )

    token = _exchanger(session).exchange_linear_code(code="the-code", redirect_uri="https://a.b")

    assert token.access_token == "lin-token"
    assert token.token_type == "Bearer"
    assert token.scope == "write"

    call = session.post.call_args
    assert call.args[0] == "https://api.linear.app/oauth/token"
    assert call.kwargs["data"] == {
        "code": "the-code",
        "redirect_uri": "https://a.b",
        "client_id": "lin-id",
        "client_secret": "lin-secret",
        "grant_type": "authorization_code",
    }
    assert call.kwargs["timeout"] == 3.0


def test_exchange_github_code_posts_json(session: Mock, response: Callable[..., Mock]) -> None:
    session.post.return_value = response(
        {"access_token": "gho_abc", "token_type": "bearer", "scope": "repo,user:email"}
    )

    token = _exchanger(session).exchange_github_code(code="c", redirect_uri="https://a.b")

    assert token.access_token == "gho_abc"
    assert token.scope == "repo,user:email"
    call = session.post.call_args
    assert call.args[0] == "https://github.com/login/oauth/access_token"
    assert call.kwargs["json"]["client_id"] == "gh-id"
    assert call.kwargs["headers"] == {"Accept": "application/json"}


def test_exchange_error_body_raises(session: Mock, response: Callable[..., Mock]) -> None:
    session.post.return_value = response(
        {"error": "bad_verification_code", "error_description": "The code is incorrect."}
    )

    with pytest.raises(OAuthExchangeError, match="The code is incorrect"):
        _exchanger(session).exchange_github_code(code="c", redirect_uri="https://a.b")


def test_exchange_missing_access_token_raises(
    session: Mock, response: Callable[..., Mock]
) -> None:
    session.post.return_value = response({"token_type": "bearer"})

    with pytest.raises(OAuthExchangeError, match="missing access_token"):
        _exchanger(session).exchange_linear_code(code="c", redirect_uri="https://a.b")


def test_exchange_requires_client_secret(session: Mock) -> None:
    exchanger = OAuthTokenExchanger(session=session)

    with pytest.raises(OAuthNotConfigured):
        exchanger.exchange_linear_code(code="c", redirect_uri="https://a.b")
    with pytest.raises(OAuthNotConfigured):
        exchanger.exchange_github_code(code="c", redirect_uri="https://a.b")
    session.post.assert_not_called()


def test_exchange_requires_code(session: Mock) -> None:
    with pytest.raises(ValueError):
        _exchanger(session).exchange_github_code(code="  ", redirect_uri="https://a.b")
