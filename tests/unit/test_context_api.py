"""Unit tests for the context persistence API client (mocked HTTP)."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import Mock

import pytest
import requests

from linear_github_sync.bridge.context_api import ContextApiClient
from linear_github_sync.bridge.crypto import EncryptedSecret, EncryptionKeyMissing, decrypt
from linear_github_sync.bridge.github.client import GitHubRepo
from linear_github_sync.bridge.models import LinearSyncContext


def _client(session: Mock, key: str = "test-key") -> ContextApiClient:
    return ContextApiClient(base_url="https://sync.example.org/", encryption_key=key, session=session)


def test_save_linear_context_posts_camel_case(
    session: Mock, response: Callable[..., Mock]
) -> None:
    session.post.return_value = response({"message": "Saved"})
    context = LinearSyncContext(
        team_id="team-1",
        team_name="Engineering",
        public_label_id="lbl-public",
        canceled_state_id=None,
        done_state_id="st-done",
        to_do_state_id="st-todo",
    )

    result = _client(session).save_linear_context(context)

    assert result == {"message": "Saved"}
    call = session.post.call_args
    assert call.args[0] == "https://sync.example.org/api/linear/save"
    assert call.kwargs["json"] == {
        "teamId": "team-1",
        "teamName": "Engineering",
        "publicLabelId": "lbl-public",
        "canceledStateId": None,
        "doneStateId": "st-done",
        "toDoStateId": "st-todo",
    }


def test_save_github_context_posts_encrypted_secret(
    session: Mock, response: Callable[..., Mock]
) -> None:
    session.post.return_value = response({"message": "Saved"})
    client = _client(session)

    encrypted = client.encrypt_webhook_secret("whsec")
    client.save_github_context(GitHubRepo(id=5, name="acme/widgets"), encrypted)

    call = session.post.call_args
    assert call.args[0] == "https://sync.example.org/api/github/save"
    body = call.kwargs["json"]
    assert body["repoId"] == 5
    assert body["repoName"] == "acme/widgets"
    assert body["webhookSecret"] != "whsec"
    assert decrypt(body["webhookSecret"], body["webhookSecretIV"], "test-key") == "whsec"


def test_encrypt_webhook_secret_requires_key(session: Mock) -> None:
    with pytest.raises(EncryptionKeyMissing):
        _client(session, key="").encrypt_webhook_secret("whsec")
    session.post.assert_not_called()


def test_save_sync_posts_both_contexts(session: Mock, response: Callable[..., Mock]) -> None:
    session.post.return_value = response({"message": "Saved"})
    client = _client(session)
    linear_context = LinearSyncContext(team_id="team-1", team_name="Engineering")
    github_context = ContextApiClient.github_context(
        GitHubRepo(id=5, name="acme/widgets"),
        EncryptedSecret(hash="beef", init_vector="00" * 16),
    )

    client.save_sync(linear_context, github_context)

    call = session.post.call_args
    assert call.args[0] == "https://sync.example.org/api/save"
    body = call.kwargs["json"]
    assert body["linear"]["teamId"] == "team-1"
    assert body["linear"]["teamName"] == "Engineering"
    assert body["github"] == {
        "repoId": 5,
        "repoName": "acme/widgets",
        "webhookSecret": "beef",
        "webhookSecretIV": "00" * 16,
    }


def test_exchange_tokens_through_api(session: Mock, response: Callable[..., Mock]) -> None:
    session.post.return_value = response({"accessToken": "t", "tokenType": "bearer", "scope": ""})
    client = _client(session)

    assert client.exchange_linear_token(code="c1", redirect_uri="https://a.b")["accessToken"] == "t"
    assert session.post.call_args.args[0] == "https://sync.example.org/api/linear/token"
    assert session.post.call_args.kwargs["json"] == {"code": "c1", "redirectURI": "https://a.b"}

    client.exchange_github_token(code="c2", redirect_uri="https://a.b")
    assert session.post.call_args.args[0] == "https://sync.example.org/api/github/token"


def test_check_for_existing_team(session: Mock, response: Callable[..., Mock]) -> None:
    session.get.return_value = response({"exists": True, "teamName": "Engineering"})

    result = _client(session).check_for_existing_team("team-1")

    assert result["exists"] is True
    assert session.get.call_args.args[0] == "https://sync.example.org/api/linear/team/team-1"


def test_check_for_existing_repo(session: Mock, response: Callable[..., Mock]) -> None:
    session.get.return_value = response({"exists": False})

    result = _client(session).check_for_existing_repo(5)

    assert result["exists"] is False
    assert session.get.call_args.args[0] == "https://sync.example.org/api/github/repo/5"


def test_http_errors_propagate(session: Mock, response: Callable[..., Mock]) -> None:
    session.get.return_value = response({"error": "nope"}, status_code=500)

    with pytest.raises(requests.HTTPError):
        _client(session).check_for_existing_team("team-1")


def test_requires_base_url(session: Mock) -> None:
    with pytest.raises(ValueError):
        ContextApiClient(base_url=" ", session=session)
