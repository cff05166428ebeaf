"""Inspect and adjust the tracked session: status, rediff, review, reset."""

from __future__ import annotations

import pygit2
import questionary
from rich.markup import escape

from teamsync.core.formatting import pluralize
from teamsync.core.logging import get_logger
from teamsync.core.progress import banner, status
from teamsync.git.errors import GitError
from teamsync.shell import run_tool
from teamsync.sync import prompts
from teamsync.sync.context import SyncContext
from teamsync.sync.display import colorize_diff
from teamsync.sync.runner import RunOutcome, run_in_repos
from teamsync.sync.state import SessionState

log = get_logger("sync.session")


def show_status(ctx: SyncContext) -> SessionState:
    """Print every tracked file, grouped by repo."""
    state = ctx.session.load()
    if state.is_empty:
        status("No files are currently tracked for commit.", style="warning")
        return state

    ctx.console.print("[blue]Currently tracked files for commit:[/blue]\n")
    for repo in state.tracked_repos():
        ctx.console.print(f"[green]  {repo}:[/green]")
        for file in state.files_for(repo):
            ctx.console.print(f"[dim]    - {escape(file)}[/dim]")
    ctx.console.print()
    status("[dim]Run [yellow]tsm sync-replace commit[/yellow] to commit these changes.[/dim]")
    status("[dim]Run [yellow]tsm sync-replace reset[/yellow] to clear tracked files.[/dim]")
    return state


def reset(ctx: SyncContext) -> None:
    ctx.session.reset()
    status("Sync-replace state has been reset. No files are tracked for commit.", style="success")


def _report_file_error(repo: str, file: str, error: Exception) -> None:
    log.error("file_failed", repo=repo, file=file, error=str(error), error_type=type(error).__name__)
    status(f"Could not process {escape(file)} in {repo}: {escape(str(error))}", style="error")


async def rediff(ctx: SyncContext) -> SessionState:
    """Offer every changed but untracked file in the tracked repos for tracking."""
    state = ctx.session.load()
    repos = state.tracked_repos()
    if not repos:
        status("No repos are currently tracked.", style="warning")
        return state

    found = 0
    for repo in repos:
        tracked = set(state.files_for(repo))
        try:
            ops = ctx.mirrors.client(repo)
            new_files = [f for f in ops.changed_files() if f not in tracked]
        except (GitError, pygit2.GitError) as e:
            log.error("rediff_failed", repo=repo, error=str(e))
            status(f"Could not diff {repo}: {escape(str(e))}", style="error")
            continue
        if not new_files:
            continue

        ctx.console.print(f"\n[blue]{repo}: {pluralize(len(new_files), 'new changed file')}[/blue]")
        for file in new_files:
            found += 1
            banner(f"{repo} - {file}", console=ctx.console)
            try:
                diff = ops.diff_text([file])
            except (GitError, pygit2.GitError) as e:
                _report_file_error(repo, file, e)
                continue
            if diff:
                ctx.console.print(colorize_diff(diff))
            if await prompts.confirm("Add this file to tracked changes?", default=True):
                state.track(repo, [file])
                status("Added to tracked files", style="success")
            else:
                status("[yellow]Skipped[/yellow]")

    state = ctx.session.save(state)
    if not found:
        status("No new changes found in tracked repos.", style="warning")
    else:
        total = sum(len(files) for files in state.modified_files.values())
        status(
            f"Done. Now tracking {pluralize(total, 'file')} in "
            f"{pluralize(len(state.modified_files), 'repo')}.",
            style="success",
        )
    return state


async def review(ctx: SyncContext) -> SessionState:
    """Walk every tracked file: keep it, or undo it back to its committed content."""
    state = ctx.session.load()
    repos = state.tracked_repos()
    if not repos:
        status("No files are currently tracked for review.", style="warning")
        return state

    total = sum(len(state.files_for(r)) for r in repos)
    ctx.console.print(f"[blue]Reviewing {pluralize(total, 'file')} in {pluralize(len(repos), 'repo')}[/blue]")

    kept = SessionState()
    number = 0
    for repo in repos:
        try:
            ops = ctx.mirrors.client(repo)
        except (GitError, pygit2.GitError) as e:
            log.error("review_open_failed", repo=repo, error=str(e))
            status(f"Could not open {repo}: {escape(str(e))}", style="error")
            kept.set_files(repo, state.files_for(repo))
            continue
        for file in state.files_for(repo):
            number += 1
            banner(f"[{number}/{total}] {repo} - {file}", console=ctx.console)
            try:
                diff = ops.diff_text([file])
            except (GitError, pygit2.GitError) as e:
                _report_file_error(repo, file, e)
                kept.track(repo, [file])
                continue
            if not diff:
                status("No changes in this file (already reset or unchanged)", style="warning")
                continue
            ctx.console.print(colorize_diff(diff))

            choice = await prompts.select(
                "What do you want to do with this file?",
                [
                    questionary.Choice("Keep changes", value="keep"),
                    questionary.Choice("Undo changes (restore original)", value="undo"),
                ],
            )
            if choice == "keep":
                kept.track(repo, [file])
                status("Keeping changes", style="success")
            else:
                try:
                    ops.restore([file])
                except (GitError, pygit2.GitError) as e:
                    _report_file_error(repo, file, e)
                    kept.track(repo, [file])
                    continue
                log.info("file_restored", repo=repo, file=file)
                status("[yellow]Changes undone[/yellow]")

    kept = ctx.session.save(kept)
    kept_files = sum(len(files) for files in kept.modified_files.values())
    if kept_files:
        status(
            f"Review complete. {pluralize(kept_files, 'file')} in "
            f"{pluralize(len(kept.modified_files), 'repo')} kept.",
            style="success",
        )
        status("[dim]Run [yellow]tsm sync-replace commit[/yellow] to commit these changes.[/dim]")
    else:
        status("All changes have been undone. No files tracked.", style="warning")
    return kept


async def open_in_editor(ctx: SyncContext) -> None:
    """Open every tracked clone in the configured editor."""
    repos = ctx.session.load().tracked_repos()
    if not repos:
        status("No repos are currently tracked.", style="warning")
        return
    editor = ctx.config.sync.editor
    status(f"[blue]Opening {pluralize(len(repos), 'repo')} in {escape(editor)}...[/blue]")
    await run_tool(editor, *(str(ctx.mirrors.path_for(r)) for r in repos))
    status("Done", style="success")


async def run_tracked(ctx: SyncContext, command: str | None = None) -> list[RunOutcome]:
    """Run a shell command in every tracked clone."""
    repos = ctx.session.load().tracked_repos()
    if not repos:
        status("No repos are currently tracked.", style="warning")
        return []
    if command is None:
        command = await prompts.text("Enter command to run in each repo:")
    if not command.strip():
        status("No command provided.", style="warning")
        return []
    return await run_in_repos(
        command,
        {r: ctx.mirrors.path_for(r) for r in repos},
        run=ctx.run,
        concurrency=ctx.config.sync.run_concurrency,
        console=ctx.console,
        tail=ctx.config.sync.failure_tail_lines,
    )
