"""Linear GraphQL client.

Wraps the handful of queries and mutations the bridge needs when a workspace is
connected: reading teams (with their labels and workflow states), registering the
sync webhook, creating the "Public" label and a few issue-side helpers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from linear_github_sync.bridge.constants import GENERAL, GITHUB, LINEAR, TIMEOUTS
from linear_github_sync.bridge.helpers import get_sync_footer
from linear_github_sync.labels import LINEAR_PUBLIC_LABEL

logger = logging.getLogger(__name__)

# Personal API keys are sent as-is; OAuth access tokens use the Bearer scheme.
_PERSONAL_KEY_PREFIX = "lin_api_"

WEBHOOK_LABEL = "GitHub Sync"
WEBHOOK_RESOURCE_TYPES: tuple[str, ...] = ("Issue", "Comment", "IssueLabel")

CONTEXT_QUERY = """query {
    teams {
        nodes {
            name
            id
            labels {
                nodes {
                    id
                    name
                }
            }
            states {
                nodes {
                    id
                    name
                }
            }
        }
    }
    viewer {
        name
        id
    }
}"""

CREATE_WEBHOOK_MUTATION = """mutation CreateWebhook(
    $callbackURL: String!, $teamID: String, $label: String, $resourceTypes: [String!]!
) {
    webhookCreate(
        input: {
            url: $callbackURL
            teamId: $teamID
            label: $label
            resourceTypes: $resourceTypes
        }
    ) {
        success
        webhook {
            id
            enabled
        }
    }
}"""

CREATE_LABEL_MUTATION = """mutation CreateLabel($teamID: String!, $name: String!, $color: String!) {
    issueLabelCreate(
        input: {
            name: $name
            color: $color
            teamId: $teamID
        }
    ) {
        success
        issueLabel {
            id
            name
        }
    }
}"""

USER_QUERY = """query User($id: String!) {
    user(id: $id) {
        id
        name
        displayName
    }
}"""

CREATE_ISSUE_MUTATION = """mutation CreateIssue(
    $title: String!, $description: String, $teamId: String!, $assigneeId: String
) {
    issueCreate(
        input: {
            title: $title
            description: $description
            teamId: $teamId
            assigneeId: $assigneeId
        }
    ) {
        success
        issue {
            id
            identifier
        }
    }
}"""

CREATE_ATTACHMENT_MUTATION = """mutation CreateAttachment(
    $issueId: String!, $title: String!, $subtitle: String, $url: String!, $iconUrl: String
) {
    attachmentCreate(
        input: {
            issueId: $issueId
            title: $title
            subtitle: $subtitle
            url: $url
            iconUrl: $iconUrl
        }
    ) {
        success
        attachment {
            id
        }
    }
}"""


class LinearGraphQLError(RuntimeError):
    """Raised when Linear answers a GraphQL request with errors."""


@dataclass(frozen=True, slots=True)
class Label:
    """A Linear issue label or workflow state (both are id + name)."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Team:
    id: str
    name: str
    labels: list[Label] = field(default_factory=list)
    states: list[Label] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Viewer:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class LinearContext:
    """Everything the setup flow needs to know about a Linear workspace."""

    teams: list[Team]
    viewer: Viewer | None

    def find_team(self, team_id: str) -> Team | None:
        for team in self.teams:
            if team.id == team_id:
                return team
        return None


@dataclass(frozen=True, slots=True)
class WebhookCreated:
    success: bool
    webhook_id: str | None
    enabled: bool


@dataclass(frozen=True, slots=True)
class LinearUser:
    id: str
    name: str
    display_name: str


@dataclass(frozen=True, slots=True)
class CreatedLinearIssue:
    id: str
    identifier: str | None


def _nodes(value: object) -> list[dict[str, Any]]:
    if not isinstance(value, dict):
        return []
    nodes = value.get("nodes")
    if not isinstance(nodes, list):
        return []
    return [n for n in nodes if isinstance(n, dict)]


def _parse_label(node: dict[str, Any]) -> Label | None:
    label_id = node.get("id")
    name = node.get("name")
    if not isinstance(label_id, str) or not isinstance(name, str):
        return None
    return Label(id=label_id, name=name)


def _parse_labels(value: object) -> list[Label]:
    labels: list[Label] = []
    for node in _nodes(value):
        label = _parse_label(node)
        if label is not None:
            labels.append(label)
    return labels


def _parse_team(node: dict[str, Any]) -> Team | None:
    team_id = node.get("id")
    name = node.get("name")
    if not isinstance(team_id, str) or not team_id.strip():
        return None
    return Team(
        id=team_id,
        name=name if isinstance(name, str) else "",
        labels=_parse_labels(node.get("labels")),
        states=_parse_labels(node.get("states")),
    )


class LinearClient:
    """Small wrapper around the Linear GraphQL API."""

    def __init__(
        self,
        *,
        token: str,
        graphql_url: str = LINEAR.graphql_endpoint,
        session: requests.Session | None = None,
        timeout: float = TIMEOUTS.default_seconds,
    ) -> None:
        if not token:
            raise ValueError("Linear token is required")

        self._graphql_url = graphql_url
        self._timeout = timeout
        self._session = session or requests.Session()

        authorization = token if token.startswith(_PERSONAL_KEY_PREFIX) else f"Bearer {token}"
        self._session.headers.update(
            {
                "Authorization": authorization,
                "Content-Type": "application/json",
                "User-Agent": "linear-github-sync",
            }
        )

    def _graphql(self, *, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        resp = self._session.post(
            self._graphql_url,
            json={"query": query, "variables": variables or {}},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, dict):
            raise LinearGraphQLError("Linear GraphQL response was not a JSON object")
        errors = payload.get("errors")
        if errors:
            # Avoid dumping the entire response; keep logs small and actionable.
            messages = []
            if isinstance(errors, list):
                for item in errors:
                    if isinstance(item, dict):
                        msg = item.get("message")
                        if isinstance(msg, str):
                            messages.append(msg)
            message = "; ".join(messages) if messages else "Unknown GraphQL error"
            raise LinearGraphQLError(f"Linear GraphQL error: {message}")
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    def get_context(self) -> LinearContext:
        """Fetch all teams (with labels and states) plus the authenticated viewer."""

        data = self._graphql(query=CONTEXT_QUERY)

        teams: list[Team] = []
        for node in _nodes(data.get("teams")):
            team = _parse_team(node)
            if team is not None:
                teams.append(team)

        viewer: Viewer | None = None
        raw_viewer = data.get("viewer")
        if isinstance(raw_viewer, dict) and isinstance(raw_viewer.get("id"), str):
            name = raw_viewer.get("name")
            viewer = Viewer(id=raw_viewer["id"], name=name if isinstance(name, str) else "")

        logger.info("Linear context fetched", extra={"team_count": len(teams)})
        return LinearContext(teams=teams, viewer=viewer)

    def create_webhook(self, *, team_id: str, callback_url: str) -> WebhookCreated:
        data = self._graphql(
            query=CREATE_WEBHOOK_MUTATION,
            variables={
                "callbackURL": callback_url,
                "teamID": team_id,
                "label": WEBHOOK_LABEL,
                "resourceTypes": list(WEBHOOK_RESOURCE_TYPES),
            },
        )
        result = data.get("webhookCreate")
        if not isinstance(result, dict):
            result = {}
        webhook = result.get("webhook")
        if not isinstance(webhook, dict):
            webhook = {}

        webhook_id = webhook.get("id")
        created = WebhookCreated(
            success=bool(result.get("success")),
            webhook_id=webhook_id if isinstance(webhook_id, str) else None,
            enabled=bool(webhook.get("enabled")),
        )
        logger.info(
            "Linear webhook created",
            extra={"team_id": team_id, "success": created.success, "webhook_id": created.webhook_id},
        )
        return created

    def create_public_label(self, *, team_id: str) -> Label | None:
        """Create the "Public" label on a team; ``None`` if Linear didn't return one."""

        data = self._graphql(
            query=CREATE_LABEL_MUTATION,
            variables={
                "teamID": team_id,
                "name": LINEAR_PUBLIC_LABEL.name,
                "color": LINEAR_PUBLIC_LABEL.color,
            },
        )
        result = data.get("issueLabelCreate")
        if not isinstance(result, dict):
            return None
        raw_label = result.get("issueLabel")
        if not isinstance(raw_label, dict):
            return None
        label = _parse_label(raw_label)
        if label is not None:
            logger.info("Linear label created", extra={"team_id": team_id, "label": label.name})
        return label

    def get_user(self, *, user_id: str) -> LinearUser:
        data = self._graphql(query=USER_QUERY, variables={"id": user_id})
        raw = data.get("user")
        if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
            raise LookupError(f"Linear user not found: {user_id}")
        name = raw.get("name") if isinstance(raw.get("name"), str) else ""
        display_name = raw.get("displayName")
        return LinearUser(
            id=raw["id"],
            name=name,
            display_name=display_name if isinstance(display_name, str) else name,
        )

    def create_issue(
        self,
        *,
        title: str,
        description: str,
        team_id: str,
        assignee_id: str | None = None,
    ) -> CreatedLinearIssue:
        if not title.strip():
            raise ValueError("Issue title is required")

        data = self._graphql(
            query=CREATE_ISSUE_MUTATION,
            variables={
                "title": title,
                "description": description,
                "teamId": team_id,
                "assigneeId": assignee_id,
            },
        )
        result = data.get("issueCreate")
        issue = result.get("issue") if isinstance(result, dict) else None
        if not isinstance(issue, dict) or not isinstance(issue.get("id"), str):
            raise LinearGraphQLError("Linear issueCreate returned no issue")

        identifier = issue.get("identifier")
        created = CreatedLinearIssue(
            id=issue["id"],
            identifier=identifier if isinstance(identifier, str) else None,
        )
        logger.info(
            "Linear issue created",
            extra={"team_id": team_id, "identifier": created.identifier},
        )
        return created

    def create_attachment(
        self,
        *,
        issue_id: str,
        issue_number: int,
        repo_full_name: str,
    ) -> str | None:
        """Attach a link to the mirrored GitHub issue; return the attachment id."""

        data = self._graphql(
            query=CREATE_ATTACHMENT_MUTATION,
            variables={
                "issueId": issue_id,
                "title": f"GitHub Issue #{issue_number}",
                "subtitle": "Synchronized",
                "url": f"https://github.com/{repo_full_name}/issues/{issue_number}",
                "iconUrl": GITHUB.icon_url,
            },
        )
        result = data.get("attachmentCreate")
        attachment = result.get("attachment") if isinstance(result, dict) else None
        if not isinstance(attachment, dict):
            return None
        attachment_id = attachment.get("id")
        return attachment_id if isinstance(attachment_id, str) else None

    def invite_member(
        self,
        *,
        member_id: str,
        team_id: str,
        repo_name: str,
        app_url: str = GENERAL.app_url,
    ) -> CreatedLinearIssue:
        """Open a Linear issue asking a teammate to authenticate with the bridge."""

        creator = self.get_user(user_id=member_id)
        message = "\n".join(
            [
                f"Hey @{creator.display_name}!",
                f"Someone on your team signed up for [{GENERAL.app_name}]({app_url}).",
                f"To mirror issues you tag as Public in {repo_name}, "
                f"simply follow the auth flow [here]({app_url}).",
                "If you'd like to stop seeing these messages, "
                "please ask your workspace admin to let us know!",
                get_sync_footer(),
            ]
        )
        return self.create_issue(
            title=f"GitHub Sync - {creator.name}, please join our workspace",
            description=message,
            team_id=team_id,
            assignee_id=member_id,
        )

    def close(self) -> None:
        self._session.close()
