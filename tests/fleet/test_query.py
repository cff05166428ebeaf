"""Tests for fleet.query."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from teamsync.fleet.query import query_repos, refresh_and_query, repo_query
from teamsync.shell import ProcessResult


class TestQueryRepos:
    """Tests for query_repos."""

    @pytest.mark.asyncio
    async def test_keeps_exit_zero_in_order(self, sync_ctx, repo_factory) -> None:
        repos = [repo_factory(n) for n in ("a", "b", "c")]

        async def run(command: str, cwd: Path) -> ProcessResult:
            return ProcessResult(0 if cwd.name in ("a", "c") else 1, "", "")

        matched = await query_repos(sync_ctx, "test -f Dockerfile", repos, run=run)
        assert [r.name for r in matched] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_os_error_is_no_match(self, sync_ctx, repo_factory) -> None:
        run = AsyncMock(side_effect=OSError("gone"))
        assert await query_repos(sync_ctx, "true", [repo_factory("a")], run=run) == []

    @pytest.mark.asyncio
    async def test_real_shell(self, sync_ctx, repo_factory) -> None:
        """Without an injected runner the context runner is used."""
        from teamsync.shell import run_command

        for name, content in (("yes", "FROM x\n"), ("no", "")):
            (sync_ctx.config.cache.repos_dir / name).mkdir()
            (sync_ctx.config.cache.repos_dir / name / "Dockerfile").write_text(content)
        sync_ctx.run = run_command

        matched = await query_repos(
            sync_ctx, "grep -q FROM Dockerfile", [repo_factory("yes"), repo_factory("no")]
        )
        assert [r.name for r in matched] == ["yes"]


class TestRefreshAndQuery:
    @pytest.mark.asyncio
    async def test_updates_mirrors_first(self, sync_ctx, fake_mirrors, repo_factory) -> None:
        repos = [repo_factory("a")]
        sync_ctx.list_repos = AsyncMock(return_value=repos)
        assert await refresh_and_query(sync_ctx, "true") == repos
        sync_ctx.mirrors.ensure_all.assert_awaited_once_with(repos)

    @pytest.mark.asyncio
    async def test_repo_query_prints_matches(self, sync_ctx, fake_mirrors, repo_factory) -> None:
        sync_ctx.list_repos = AsyncMock(return_value=[repo_factory("api")])
        await repo_query(sync_ctx, "grep -q '[x]' f")
        out = sync_ctx.console.file.getvalue()
        assert "1 repo match the query grep -q '[x]' f:" in out
        assert " - api (https://github.com/acme/api)" in out
