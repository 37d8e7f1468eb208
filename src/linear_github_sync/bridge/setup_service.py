"""Connect a Linear team to a GitHub repository.

The service ties together the two API clients and the persistence API:
- derive the Linear ids the sync layer needs (Public label, workflow states)
- register webhooks on both sides
- save both halves of the mapping
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from linear_github_sync.bridge.context_api import ContextApiClient
from linear_github_sync.bridge.crypto import generate_webhook_secret
from linear_github_sync.bridge.github.client import GitHubClient, GitHubRepo, WebhookRegistration
from linear_github_sync.bridge.linear.client import Label, LinearClient, Team, WebhookCreated
from linear_github_sync.bridge.models import LinearSyncContext
from linear_github_sync.labels import (
    GITHUB_LINEAR_LABEL,
    LABEL_PUBLIC,
    STATE_CANCELED,
    STATE_DONE,
    STATE_TODO,
    find_id_by_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PublicLabelMissing(Exception):
    """Raised when a team has no "Public" label and Linear refused to create one."""

    team_id: str

    def __str__(self) -> str:
        return f'Please create a Linear label called "{LABEL_PUBLIC}" (team {self.team_id})'


@dataclass(frozen=True, slots=True)
class LinkResult:
    linear_context: LinearSyncContext
    repo: GitHubRepo
    linear_webhook: WebhookCreated
    github_webhook: WebhookRegistration
    github_label_created: bool


class SyncSetupService:
    def __init__(
        self,
        *,
        linear: LinearClient,
        github: GitHubClient,
        context_api: ContextApiClient,
        webhook_url: str,
    ) -> None:
        self._linear = linear
        self._github = github
        self._context_api = context_api
        self._webhook_url = webhook_url

    def build_linear_sync_context(self, team: Team) -> LinearSyncContext:
        """Derive the ids the sync layer needs, creating the Public label if missing."""

        # States and labels share one namespace here; the sync only needs names -> ids.
        nodes: list[Label] = [*team.states, *team.labels]

        if find_id_by_name(nodes, LABEL_PUBLIC) is None:
            logger.info("Public label missing; creating it", extra={"team_id": team.id})
            created = self._linear.create_public_label(team_id=team.id)
            if created is None:
                raise PublicLabelMissing(team_id=team.id)
            nodes.append(created)

        return LinearSyncContext(
            team_id=team.id,
            team_name=team.name,
            public_label_id=find_id_by_name(nodes, LABEL_PUBLIC),
            canceled_state_id=find_id_by_name(nodes, STATE_CANCELED),
            done_state_id=find_id_by_name(nodes, STATE_DONE),
            to_do_state_id=find_id_by_name(nodes, STATE_TODO),
        )

    def save_linear_context(self, team: Team) -> LinearSyncContext:
        context = self.build_linear_sync_context(team)
        self._context_api.save_linear_context(context)
        return context

    def link(self, *, team_id: str, repo_name: str) -> LinkResult:
        """Connect ``team_id`` to ``repo_name`` ("owner/repo") end to end.

        The webhook secret is encrypted before any remote call; a missing
        encryption key raises ``EncryptionKeyMissing`` before hooks exist.
        """

        webhook_secret = generate_webhook_secret()
        encrypted_secret = self._context_api.encrypt_webhook_secret(webhook_secret)

        workspace = self._linear.get_context()
        team = workspace.find_team(team_id)
        if team is None:
            raise LookupError(f"Linear team not found: {team_id}")

        repo = self._github.find_repo(repo_name)
        if repo is None:
            raise LookupError(f"GitHub repository not found or not accessible: {repo_name}")

        linear_context = self.build_linear_sync_context(team)

        linear_webhook = self._linear.create_webhook(
            team_id=team.id, callback_url=self._webhook_url
        )
        if not linear_webhook.success:
            logger.warning("Linear did not confirm webhook creation", extra={"team_id": team.id})

        github_webhook = self._github.create_webhook(
            repository=repo.name,
            webhook_url=self._webhook_url,
            secret=webhook_secret,
        )
        label_created = self._github.ensure_label(repository=repo.name, spec=GITHUB_LINEAR_LABEL)

        self._context_api.save_linear_context(linear_context)
        self._context_api.save_github_context(repo, encrypted_secret)

        logger.info(
            "Team linked to repository",
            extra={"team_id": team.id, "team_name": team.name, "repo": repo.name},
        )
        return LinkResult(
            linear_context=linear_context,
            repo=repo,
            linear_webhook=linear_webhook,
            github_webhook=github_webhook,
            github_label_created=label_created,
        )
