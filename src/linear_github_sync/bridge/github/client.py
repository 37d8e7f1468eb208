"""GitHub API client for connecting a repository to the bridge.

REST calls go through a plain ``requests.Session`` so they are easy to stub in
tests; webhook registration uses PyGithub.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests
from github import Auth, Github

from linear_github_sync.bridge.constants import GITHUB, TIMEOUTS
from linear_github_sync.labels import LabelSpec

logger = logging.getLogger(__name__)

_MAX_REPO_PAGES = 10
_REPOS_PER_PAGE = 100


@dataclass(frozen=True, slots=True)
class GitHubUser:
    id: int
    login: str
    name: str


@dataclass(frozen=True, slots=True)
class GitHubRepo:
    """A repository the user can connect. ``name`` is the full ``owner/repo`` name."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class WebhookRegistration:
    id: int
    active: bool
    events: list[str]
    url: str


class GitHubClient:
    """Small wrapper around the GitHub REST API for the setup flow."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        session: requests.Session | None = None,
        github_api: Github | None = None,
        timeout: float = TIMEOUTS.default_seconds,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._token = token
        self._rest_base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "linear-github-sync",
            }
        )
        self._github = github_api

    def _api(self) -> Github:
        if self._github is None:
            self._github = Github(auth=Auth.Token(self._token), base_url=self._rest_base_url)
        return self._github

    def _url(self, path: str) -> str:
        return f"{self._rest_base_url}/{path.lstrip('/')}"

    def _repo_url(self, *, repository: str, path: str) -> str:
        repo = repository.strip().strip("/")
        path = path.strip("/")
        if not path:
            return f"{self._rest_base_url}/repos/{repo}"
        return f"{self._rest_base_url}/repos/{repo}/{path}"

    def get_user(self) -> GitHubUser:
        """Return the authenticated user."""

        resp = self._session.get(self._url("user"), timeout=self._timeout)
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()

        user_id = data.get("id")
        login = data.get("login")
        if not isinstance(user_id, int) or not isinstance(login, str):
            raise ValueError("Unexpected user response: missing id/login")

        name = data.get("name")
        return GitHubUser(id=user_id, login=login, name=name if isinstance(name, str) else login)

    def list_repos(self) -> list[GitHubRepo]:
        """List repositories the user can access, most recently updated first."""

        repos: list[GitHubRepo] = []
        for page in range(1, _MAX_REPO_PAGES + 1):
            resp = self._session.get(
                self._url("user/repos"),
                params={"per_page": _REPOS_PER_PAGE, "sort": "updated", "page": page},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, list):
                break

            for item in payload:
                if not isinstance(item, dict):
                    continue
                repo_id = item.get("id")
                full_name = item.get("full_name")
                if isinstance(repo_id, int) and isinstance(full_name, str) and full_name:
                    repos.append(GitHubRepo(id=repo_id, name=full_name))

            if len(payload) < _REPOS_PER_PAGE:
                break

        logger.debug("GitHub repositories listed", extra={"repo_count": len(repos)})
        return repos

    def find_repo(self, name: str) -> GitHubRepo | None:
        wanted = name.strip().strip("/").lower()
        for repo in self.list_repos():
            if repo.name.lower() == wanted:
                return repo
        return None

    def create_webhook(
        self,
        *,
        repository: str,
        webhook_url: str,
        secret: str,
    ) -> WebhookRegistration:
        """Register the sync webhook on ``repository`` ("owner/repo")."""

        if not secret:
            raise ValueError("webhook secret is required")

        repo = self._api().get_repo(repository.strip().strip("/"))
        hook = repo.create_hook(
            name="web",
            config={
                "url": webhook_url,
                "content_type": "json",
                "insecure_ssl": "0",
                "secret": secret,
            },
            events=list(GITHUB.webhook_events),
            active=True,
        )

        hook_url = hook.config.get("url") if isinstance(hook.config, dict) else None
        registration = WebhookRegistration(
            id=hook.id,
            active=bool(hook.active),
            events=list(hook.events or []),
            url=hook_url if isinstance(hook_url, str) else webhook_url,
        )
        logger.info(
            "GitHub webhook registered",
            extra={"repo": repository, "hook_id": registration.id},
        )
        return registration

    def ensure_label(self, *, repository: str, spec: LabelSpec) -> bool:
        """Create a label if it doesn't exist yet. Returns True if it was created."""

        url = self._repo_url(repository=repository, path="labels")
        payload = {
            "name": spec.name,
            "color": spec.color.lstrip("#"),
            "description": spec.description,
        }
        resp = self._session.post(url, json=payload, timeout=self._timeout)
        if resp.status_code == 422:
            # Label already exists.
            return False
        resp.raise_for_status()
        logger.info("GitHub label created", extra={"repo": repository, "label": spec.name})
        return True

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
