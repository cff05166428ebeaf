"""GitHub repository listing."""

from teamsync.github.client import GitHubClient, fetch_team_repositories, resolve_token
from teamsync.github.models import RepoRef

__all__ = [
    "GitHubClient",
    "fetch_team_repositories",
    "RepoRef",
    "resolve_token",
]
