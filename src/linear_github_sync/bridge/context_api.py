"""Client for the bridge's context persistence API.

The persistence layer itself lives elsewhere; this module only knows its
endpoints:

- ``POST /api/linear/save``          store the Linear half of a mapping
- ``POST /api/github/save``          store the GitHub half of a mapping
- ``POST /api/linear/token``         trade a Linear OAuth code for a token
- ``POST /api/github/token``         trade a GitHub OAuth code for a token
- ``POST /api/save``                 store both halves in one call
- ``GET  /api/linear/team/{teamId}`` look up an already-connected team
- ``GET  /api/github/repo/{repoId}`` look up an already-connected repository
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from linear_github_sync.bridge.constants import TIMEOUTS
from linear_github_sync.bridge.crypto import EncryptedSecret, encrypt
from linear_github_sync.bridge.github.client import GitHubRepo
from linear_github_sync.bridge.models import (
    GitHubSyncContext,
    LinearSyncContext,
    TokenExchangeRequest,
)

logger = logging.getLogger(__name__)


class ContextApiClient:
    def __init__(
        self,
        *,
        base_url: str,
        encryption_key: str = "",
        session: requests.Session | None = None,
        timeout: float = TIMEOUTS.default_seconds,
    ) -> None:
        if not base_url.strip():
            raise ValueError("Context API base URL is required")

        self._base_url = base_url.rstrip("/")
        self._encryption_key = encryption_key
        self._timeout = timeout
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self._base_url}/api/{path.lstrip('/')}"

    @staticmethod
    def _json(resp: requests.Response) -> dict[str, Any]:
        resp.raise_for_status()
        data = resp.json()
        return data if isinstance(data, dict) else {"result": data}

    def _post(self, path: str, payload: dict[str, object]) -> dict[str, Any]:
        return self._json(self._session.post(self._url(path), json=payload, timeout=self._timeout))

    def _get(self, path: str) -> dict[str, Any]:
        return self._json(self._session.get(self._url(path), timeout=self._timeout))

    def encrypt_webhook_secret(self, webhook_secret: str) -> EncryptedSecret:
        """Encrypt a webhook secret for storage.

        Raises ``EncryptionKeyMissing`` when no key is configured, so callers can
        check this before registering any webhook.
        """

        return encrypt(webhook_secret, self._encryption_key)

    def save_linear_context(self, context: LinearSyncContext) -> dict[str, Any]:
        result = self._post("linear/save", context.to_payload())
        logger.info(
            "Linear context saved",
            extra={"team_id": context.team_id, "team_name": context.team_name},
        )
        return result

    @staticmethod
    def github_context(repo: GitHubRepo, encrypted_secret: EncryptedSecret) -> GitHubSyncContext:
        return GitHubSyncContext(
            repo_id=repo.id,
            repo_name=repo.name,
            webhook_secret=encrypted_secret.hash,
            webhook_secret_iv=encrypted_secret.init_vector,
        )

    def save_github_context(
        self, repo: GitHubRepo, encrypted_secret: EncryptedSecret
    ) -> dict[str, Any]:
        context = self.github_context(repo, encrypted_secret)
        result = self._post("github/save", context.to_payload())
        logger.info("GitHub context saved", extra={"repo_id": repo.id, "repo": repo.name})
        return result

    def save_sync(
        self, linear_context: LinearSyncContext, github_context: GitHubSyncContext
    ) -> dict[str, Any]:
        payload: dict[str, object] = {
            "github": github_context.to_payload(),
            "linear": linear_context.to_payload(),
        }
        result = self._post("save", payload)
        logger.info(
            "Sync saved",
            extra={"team_id": linear_context.team_id, "repo": github_context.repo_name},
        )
        return result

    def exchange_linear_token(self, *, code: str, redirect_uri: str) -> dict[str, Any]:
        request = TokenExchangeRequest(code=code, redirect_uri=redirect_uri)
        return self._post("linear/token", request.to_payload())

    def exchange_github_token(self, *, code: str, redirect_uri: str) -> dict[str, Any]:
        request = TokenExchangeRequest(code=code, redirect_uri=redirect_uri)
        return self._post("github/token", request.to_payload())

    def check_for_existing_team(self, team_id: str) -> dict[str, Any]:
        if not team_id.strip():
            raise ValueError("team_id is required")
        return self._get(f"linear/team/{team_id}")

    def check_for_existing_repo(self, repo_id: int | str) -> dict[str, Any]:
        if not str(repo_id).strip():
            raise ValueError("repo_id is required")
        return self._get(f"github/repo/{repo_id}")

    def close(self) -> None:
        self._session.close()
