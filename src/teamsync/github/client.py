"""GitHub GraphQL client for listing team repositories."""

from __future__ import annotations

import os
from types import TracebackType
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from teamsync.config.loader import require_org, require_team
from teamsync.config.models import GitHubConfig, TeamSyncConfig
from teamsync.core.errors import GitHubError
from teamsync.core.logging import get_logger
from teamsync.core.progress import spinner
from teamsync.github.models import RepoRef, SingleRepositoryData, TeamRepositoriesData
from teamsync.shell import run_exec

log = get_logger("github")

_T = TypeVar("_T", bound=BaseModel)

_REPO_FIELDS = """
fragment RepoFields on Repository {
    name
    url
    sshUrl
    isArchived
    defaultBranchRef {
        name
    }
}
"""

TEAM_REPOSITORIES_QUERY = (
    """
query ($org: String!, $team: String!, $after: String) {
    organization(login: $org) {
        team(slug: $team) {
            repositories(first: 100, after: $after, orderBy: { field: PUSHED_AT, direction: DESC }) {
                nodes {
                    ...RepoFields
                }
                pageInfo {
                    hasNextPage
                    endCursor
                }
            }
        }
    }
}
"""
    + _REPO_FIELDS
)

SINGLE_REPOSITORY_QUERY = (
    """
query ($owner: String!, $name: String!) {
    repository(owner: $owner, name: $name) {
        ...RepoFields
    }
}
"""
    + _REPO_FIELDS
)


async def resolve_token(config: GitHubConfig) -> str:
    """Find an API token: config, then GITHUB_TOKEN, then the gh CLI."""
    if config.token is not None:
        return config.token.get_secret_value()
    if token := os.environ.get("GITHUB_TOKEN"):
        return token
    try:
        result = await run_exec("gh", "auth", "token")
    except FileNotFoundError as e:
        raise GitHubError.auth_missing() from e
    token = result.stdout.strip()
    if not result.ok or not token:
        raise GitHubError.auth_missing()
    return token


class GitHubClient:
    """Async GraphQL client scoped to one organization.

    Usage::

        async with GitHubClient(config.github, org="acme", token=token) as gh:
            repos = await gh.list_team_repositories("platform")
    """

    def __init__(
        self,
        config: GitHubConfig,
        *,
        org: str,
        token: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._org = org
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
            },
            timeout=config.timeout_sec,
            transport=transport,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _query(self, query: str, variables: dict[str, Any], model: type[_T]) -> _T:
        try:
            response = await self._client.post(
                self._config.api_url, json={"query": query, "variables": variables}
            )
        except httpx.HTTPError as e:
            raise GitHubError.request_failed(str(e)) from e
        if response.status_code >= 400:
            raise GitHubError.request_failed(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise GitHubError.invalid_response(f"body is not JSON: {e}") from e
        if not isinstance(payload, dict):
            raise GitHubError.invalid_response("body is not a JSON object")
        if errors := payload.get("errors"):
            raise GitHubError.query_error([str(err.get("message", err)) for err in errors])
        try:
            return model.model_validate(payload.get("data"))
        except ValidationError as e:
            raise GitHubError.invalid_response(str(e)) from e

    async def list_team_repositories(
        self, team: str, *, include_archived: bool = False
    ) -> list[RepoRef]:
        """Repositories of ``team``, most recently pushed first.

        Archived and ignored repositories are filtered out unless
        ``include_archived`` is set.
        """
        log.info("list_team_repositories", org=self._org, team=team)
        repos: list[RepoRef] = []
        after: str | None = None
        while True:
            data = await self._query(
                TEAM_REPOSITORIES_QUERY,
                {"org": self._org, "team": team, "after": after},
                TeamRepositoriesData,
            )
            if data.organization is None:
                raise GitHubError.invalid_response(f"organization {self._org!r} not found")
            if data.organization.team is None:
                raise GitHubError.invalid_response(f"team {team!r} not found in {self._org}")
            page = data.organization.team.repositories
            repos.extend(page.nodes)
            if not page.page_info.has_next_page or not page.page_info.end_cursor:
                break
            after = page.page_info.end_cursor
        if include_archived:
            return repos
        ignored = set(self._config.ignored_repos)
        return [r for r in repos if not r.is_archived and r.name not in ignored]

    async def get_repository(self, full_name: str) -> list[RepoRef]:
        """Look up ``owner/name``. Returns a single-element list, or [] if absent."""
        owner, _, name = full_name.partition("/")
        if not owner or not name or "/" in name:
            log.warning("invalid_repository_name", full_name=full_name)
            return []
        data = await self._query(
            SINGLE_REPOSITORY_QUERY, {"owner": owner, "name": name}, SingleRepositoryData
        )
        return [data.repository] if data.repository else []


async def fetch_team_repositories(
    config: TeamSyncConfig, *, include_archived: bool = False
) -> list[RepoRef]:
    """List the configured team's repositories with a resolved token."""
    team = require_team(config)
    org = require_org(config)
    token = await resolve_token(config.github)
    async with GitHubClient(config.github, org=org, token=token) as gh:
        with spinner(f"Getting all active repositories for team {team}"):
            return await gh.list_team_repositories(team, include_archived=include_archived)
