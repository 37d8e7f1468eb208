from linear_github_sync.bridge.linear.client import (
    Label,
    LinearClient,
    LinearContext,
    LinearGraphQLError,
    Team,
)

__all__ = ["Label", "LinearClient", "LinearContext", "LinearGraphQLError", "Team"]
