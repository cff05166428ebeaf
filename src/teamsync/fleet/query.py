"""Narrow the team's repos down with a shell query run in each clone."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from rich.markup import escape

from teamsync.core.formatting import pluralize
from teamsync.core.logging import get_logger
from teamsync.github.models import RepoRef
from teamsync.shell import CommandRunner, ProcessResult
from teamsync.sync.context import SyncContext

log = get_logger("fleet.query")


async def _run_query(query: str, repo: RepoRef, ctx: SyncContext, run: CommandRunner) -> bool:
    path = ctx.mirrors.path_for(repo.name)
    try:
        result = await run(query, path)
    except OSError as e:
        log.warning("query_failed", repo=repo.name, error=str(e))
        result = ProcessResult(exit_code=-1, stdout="", stderr=str(e))
    log.debug("query_done", repo=repo.name, exit_code=result.exit_code)
    return result.ok


async def query_repos(
    ctx: SyncContext,
    query: str,
    repos: Sequence[RepoRef],
    *,
    run: CommandRunner | None = None,
) -> list[RepoRef]:
    """Repos whose clone answers ``query`` with exit code 0, in input order.

    The query runs concurrently in every clone through the shell, so
    ``grep -q``, ``test -f`` and pipelines all work as relevance checks.
    """
    run = run or ctx.run
    results = await asyncio.gather(*(_run_query(query, repo, ctx, run) for repo in repos))
    return [repo for repo, ok in zip(repos, results, strict=True) if ok]


async def refresh_and_query(ctx: SyncContext, query: str) -> list[RepoRef]:
    """List the team's repos, bring their clones up to date, then query them."""
    repos = await ctx.list_repos()
    await ctx.mirrors.ensure_all(repos)
    return await query_repos(ctx, query, repos)


async def repo_query(ctx: SyncContext, query: str) -> list[RepoRef]:
    matched = await refresh_and_query(ctx, query)
    ctx.console.print(
        f"The following [green]{pluralize(len(matched), 'repo')}[/green] match the query "
        f"[yellow]{escape(query)}[/yellow]:"
    )
    for repo in matched:
        ctx.console.print(f" - {repo.name} ({repo.url})", highlight=False)
    return matched
