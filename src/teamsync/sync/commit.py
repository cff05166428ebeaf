"""Commit and push tracked files across repos.

Every repo is staged, committed and pushed on its own, concurrently with
the others. A repo that fails keeps its tracked files so the next commit
run retries only that repo.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import pygit2
from rich.markup import escape

from teamsync.core.formatting import pluralize
from teamsync.core.logging import get_logger
from teamsync.core.progress import banner, status
from teamsync.git.errors import GitError
from teamsync.git.ops import GitOps
from teamsync.sync import prompts
from teamsync.sync.context import SyncContext
from teamsync.sync.display import colorize_diff
from teamsync.sync.state import SessionState

log = get_logger("sync.commit")

StageFn = Callable[[GitOps, str], None]


@dataclass(frozen=True, slots=True)
class CommitSummary:
    pushed: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    aborted: bool = False


def stage_all(ops: GitOps, _repo: str) -> None:
    ops.stage_all()


async def ask_commit_message() -> str:
    while True:
        message = (await prompts.text("Enter commit message:")).strip()
        if message:
            return message
        status("[red]The commit message cannot be empty[/red]")


async def push_changes(
    ctx: SyncContext,
    repos: Sequence[str],
    message: str,
    *,
    stage: StageFn = stage_all,
    urls: dict[str, str] | None = None,
) -> tuple[list[str], list[str]]:
    """Stage, commit and push each repo concurrently. Returns ``(pushed, failed)``."""

    def commit_and_push(name: str) -> str:
        ops = ctx.mirrors.client(name)
        stage(ops, name)
        sha = ops.commit(message)
        result = ops.push()
        log.info("pushed", repo=name, sha=sha, remote=result.remote, branch=result.branch)
        return (urls or {}).get(name) or result.url

    async def one(name: str) -> bool:
        status(f"Committing and pushing [blue]{name}[/blue]")
        try:
            url = await asyncio.to_thread(commit_and_push, name)
        except (GitError, pygit2.GitError, OSError) as e:
            log.error("push_failed", repo=name, error=str(e), error_type=type(e).__name__)
            status(f"Error pushing {name}: {escape(str(e))}", style="error")
            return False
        status(f"Pushed to repo {name} - {url}", style="success")
        return True

    results = await asyncio.gather(*(one(name) for name in repos))
    pushed = [name for name, ok in zip(repos, results, strict=True) if ok]
    failed = [name for name, ok in zip(repos, results, strict=True) if not ok]
    return pushed, failed


def _retained(state: SessionState, names: Sequence[str]) -> SessionState:
    return SessionState(modified_files={name: state.files_for(name) for name in names})


async def commit_tracked(ctx: SyncContext) -> CommitSummary:
    """Confirm, show diffs, confirm again, then push every tracked repo.

    Declining either confirmation changes nothing. Afterwards the session
    holds only the repos whose diff or push failed.
    """
    state = ctx.session.load()
    names = state.tracked_repos()
    if not names:
        status("No files are currently tracked for commit.", style="warning")
        return CommitSummary()

    ctx.console.print("[blue]Files to commit:[/blue]\n")
    for name in names:
        ctx.console.print(f"[green]  {name}: {pluralize(len(state.files_for(name)), 'file')}[/green]")
    ctx.console.print()

    if not await prompts.confirm(
        f"Do you want to commit and push changes to {pluralize(len(names), 'repo')}?"
    ):
        status("Aborted.", style="warning")
        return CommitSummary(aborted=True)

    message = await ask_commit_message()
    team_repos = {r.name: r for r in await ctx.list_repos()}

    ready: list[str] = []
    skipped: list[str] = []
    errored: list[str] = []
    for name in names:
        if name not in team_repos:
            status(f"Repo {name} not found, skipping", style="error")
            skipped.append(name)
            continue
        try:
            diff = ctx.mirrors.client(name).diff_text()
        except (GitError, pygit2.GitError) as e:
            log.error("diff_failed", repo=name, error=str(e), error_type=type(e).__name__)
            status(f"Could not diff {name}: {escape(str(e))}", style="error")
            errored.append(name)
            continue
        if not diff:
            status(
                f"No changes found in {name}, skipping (files may have been reset)",
                style="warning",
            )
            skipped.append(name)
            continue
        banner(f"Repository: {name}", console=ctx.console)
        ctx.console.print(colorize_diff(diff))
        ready.append(name)

    if not ready:
        status("No repos with actual changes to commit.", style="warning")
        ctx.session.save(_retained(state, errored))
        return CommitSummary(failed=tuple(errored), skipped=tuple(skipped))

    if not await prompts.confirm(
        f"Review complete. Push changes to {pluralize(len(ready), 'repo')}?"
    ):
        status("Aborted. Changes are still tracked locally.", style="warning")
        return CommitSummary(aborted=True)

    pushed, failed = await push_changes(
        ctx,
        ready,
        message,
        stage=lambda ops, name: ops.stage(state.files_for(name)),
        urls={name: team_repos[name].url for name in ready},
    )
    failed = failed + errored
    ctx.session.save(_retained(state, failed))

    if pushed:
        status(f"Successfully pushed {pluralize(len(pushed), 'repo')}.", style="success")
    if failed:
        status(
            f"Failed to commit {pluralize(len(failed), 'repo')}. They remain tracked in state.",
            style="error",
        )
        status("Run [yellow]tsm sync-replace commit[/yellow] to retry.")
    else:
        status("State cleared. All tracked files have been committed.", style="success")
    return CommitSummary(tuple(pushed), tuple(failed), tuple(skipped))
