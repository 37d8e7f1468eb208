from linear_github_sync.bridge.github.client import GitHubClient, GitHubRepo, GitHubUser

__all__ = ["GitHubClient", "GitHubRepo", "GitHubUser"]
