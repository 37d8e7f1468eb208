"""Configuration for the REST server.

The server starts without OAuth secrets configured; the token endpoints check for
them at request time and answer 409 when they're missing.
"""

from __future__ import annotations

from pydantic import Field

from linear_github_sync.bridge.config import SyncSettings


class ServerSettings(SyncSettings):
    """Settings for the token-exchange API."""

    # Dev-friendly CORS for a local UI. Override via SYNC_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="SYNC_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
