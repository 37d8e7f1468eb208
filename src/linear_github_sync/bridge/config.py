"""Configuration for the sync bridge.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

OAuth client secrets and the encryption key are only needed by the commands and
endpoints that use them, so nothing is required at startup. Callers validate at
use time.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from linear_github_sync.bridge.constants import GENERAL, GITHUB, LINEAR


class SyncSettings(BaseSettings):
    """Settings for the Linear <-> GitHub bridge.

    Environment variables:
    - LINEAR_OAUTH_ID / LINEAR_OAUTH_SECRET
    - GITHUB_OAUTH_ID / GITHUB_OAUTH_SECRET
    - LINEAR_TOKEN / SYNC_GITHUB_TOKEN (optional, CLI only)
    - LINEAR_IP_ORIGINS (optional, comma-separated)
    - APP_URL           (optional)
    - SYNC_API_URL      (optional, defaults to APP_URL)
    - ENCRYPTION_KEY
    - NODE_ENV          (optional)
    - LOG_LEVEL         (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `SyncSettings(_env_file=path_to_env)`.
    """

    linear_oauth_id: str = Field(
        default=LINEAR.oauth_id,
        validation_alias="LINEAR_OAUTH_ID",
        description="Linear OAuth application client ID",
    )
    linear_oauth_secret: str = Field(
        default="",
        validation_alias="LINEAR_OAUTH_SECRET",
        description="Linear OAuth application client secret (server side only)",
    )
    github_oauth_id: str = Field(
        default=GITHUB.oauth_id,
        validation_alias="GITHUB_OAUTH_ID",
        description="GitHub OAuth application client ID",
    )
    github_oauth_secret: str = Field(
        default="",
        validation_alias="GITHUB_OAUTH_SECRET",
        description="GitHub OAuth application client secret (server side only)",
    )

    # Access tokens for CLI use; the OAuth flow produces these per user.
    # A dedicated GitHub variable avoids collisions with tools that read GITHUB_TOKEN.
    linear_token: str = Field(default="", validation_alias="LINEAR_TOKEN")
    github_token: str = Field(default="", validation_alias="SYNC_GITHUB_TOKEN")

    linear_ip_origins: str = Field(
        default=",".join(LINEAR.ip_origins),
        validation_alias="LINEAR_IP_ORIGINS",
        description="Comma-separated list of IPs Linear sends webhooks from.",
    )

    app_url: str = Field(
        default=GENERAL.app_url,
        validation_alias="APP_URL",
        description="Public origin of the bridge; used as OAuth redirect and webhook base",
    )
    sync_api_url: str = Field(
        default="",
        validation_alias="SYNC_API_URL",
        description="Base URL of the context persistence API (defaults to APP_URL)",
    )

    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    linear_graphql_url: str = Field(
        default=LINEAR.graphql_endpoint,
        validation_alias="LINEAR_GRAPHQL_URL",
    )

    encryption_key: str = Field(
        default="",
        validation_alias="ENCRYPTION_KEY",
        description="Secret used to encrypt webhook secrets and refresh tokens at rest",
    )

    environment: str = Field(default="production", validation_alias="NODE_ENV")

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    def parsed_linear_ip_origins(self) -> list[str]:
        return [o.strip() for o in self.linear_ip_origins.split(",") if o.strip()]

    @property
    def redirect_uri(self) -> str:
        """OAuth redirect target; the bridge's own origin."""

        return self.app_url.rstrip("/")

    @property
    def context_api_url(self) -> str:
        return (self.sync_api_url or self.app_url).rstrip("/")
