"""Pydantic models for payloads exchanged with the context persistence API.

Field names on the wire are camelCase, matching what the persistence API stores.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class LinearSyncContext(_WireModel):
    """The Linear half of a team <-> repo mapping."""

    team_id: str = Field(alias="teamId")
    team_name: str = Field(alias="teamName")
    public_label_id: str | None = Field(default=None, alias="publicLabelId")
    canceled_state_id: str | None = Field(default=None, alias="canceledStateId")
    done_state_id: str | None = Field(default=None, alias="doneStateId")
    to_do_state_id: str | None = Field(default=None, alias="toDoStateId")


class GitHubSyncContext(_WireModel):
    """The GitHub half of the mapping; the webhook secret is stored encrypted."""

    repo_id: int = Field(alias="repoId")
    repo_name: str = Field(alias="repoName")
    webhook_secret: str = Field(alias="webhookSecret")
    webhook_secret_iv: str = Field(alias="webhookSecretIV")


class TokenExchangeRequest(_WireModel):
    # Older clients send the authorization code as "refreshToken".
    code: str = Field(validation_alias=AliasChoices("code", "refreshToken"))
    redirect_uri: str = Field(
        validation_alias=AliasChoices("redirectURI", "redirect_uri"),
        serialization_alias="redirectURI",
    )


class TokenExchangeResponse(_WireModel):
    access_token: str = Field(alias="accessToken")
    token_type: str = Field(default="bearer", alias="tokenType")
    scope: str = ""
