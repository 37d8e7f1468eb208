"""Static endpoints, OAuth scopes and app identity strings.

Values that can be overridden per deployment (OAuth client IDs, Linear IP origins,
the public app URL) are read through :class:`linear_github_sync.bridge.config.SyncSettings`;
the defaults below are what those settings fall back to.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LinearConstants:
    oauth_id: str = "de24196afa78e6f3f99875b753a3ae29"
    oauth_url: str = "https://linear.app/oauth/authorize"
    token_url: str = "https://api.linear.app/oauth/token"
    scopes: tuple[str, ...] = ("write",)
    new_token_url: str = "https://linear.app/settings/api"
    token_section_header: str = "Personal API keys"
    graphql_endpoint: str = "https://api.linear.app/graphql"
    ip_origins: tuple[str, ...] = ("35.231.147.226", "35.243.134.228")
    storage_key: str = "linear-context"
    app_url: str = "https://linear.app"
    github_label: str = "linear"


@dataclass(frozen=True, slots=True)
class GitHubConstants:
    oauth_id: str = "487937ed57e1d5ffea0d"
    oauth_url: str = "https://github.com/login/oauth/authorize"
    token_url: str = "https://github.com/login/oauth/access_token"
    scopes: tuple[str, ...] = ("repo", "write:repo_hook", "read:user", "user:email")
    new_token_url: str = "https://github.com/settings/tokens/new"
    token_note: str = "Linear-GitHub Sync"
    webhook_events: tuple[str, ...] = ("issues", "issue_comment", "label")
    list_repos_endpoint: str = "https://api.github.com/user/repos?per_page=100&sort=updated"
    user_endpoint: str = "https://api.github.com/user"
    repo_endpoint: str = "https://api.github.com/repos"
    icon_url: str = (
        "https://cdn.discordapp.com/attachments/937628023497297930/988735284504043520/github.png"
    )
    storage_key: str = "github-context"
    uuid_suffix: str = "decafbad"


@dataclass(frozen=True, slots=True)
class Timeouts:
    # Milliseconds.
    default: int = 3000

    @property
    def default_seconds(self) -> float:
        return self.default / 1000


@dataclass(frozen=True, slots=True)
class GeneralConstants:
    app_name: str = "Linear-GitHub Sync"
    app_url: str = "https://synclinear.com"
    contribute_url: str = "https://github.com/calcom/linear-to-github"


LINEAR = LinearConstants()
GITHUB = GitHubConstants()
TIMEOUTS = Timeouts()
GENERAL = GeneralConstants()
