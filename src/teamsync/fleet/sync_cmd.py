"""Run one shell command across queried repos, review, then push.

Repos are handled one after another so each diff can be reviewed before
the next command starts. Pushing happens at the end, for every repo the
operator staged.
"""

from __future__ import annotations

from collections import Counter
from typing import Literal

import pygit2
from rich.markup import escape
from rich.text import Text

from teamsync.core.errors import SyncError
from teamsync.core.logging import get_logger
from teamsync.core.progress import status
from teamsync.fleet.query import refresh_and_query
from teamsync.git.errors import GitError
from teamsync.shell import ProcessResult
from teamsync.sync import prompts
from teamsync.sync.commit import ask_commit_message, push_changes
from teamsync.sync.context import SyncContext
from teamsync.sync.display import colorize_diff
from teamsync.sync.repos import select_repos

log = get_logger("fleet.sync_cmd")

CommandResult = Literal["staged", "failed", "dismissed"]


def show_changes(ctx: SyncContext, name: str) -> bool:
    """Print the diff summary and per-file diffs of a clone. False if clean."""
    ops = ctx.mirrors.client(name)
    summary = ops.diff_summary()
    ctx.console.print(
        f"[yellow]{summary.changed}[/yellow] files changed, "
        f"[green]{summary.insertions}[/green] insertions(+), "
        f"[red]{summary.deletions}[/red] deletions(-)"
    )
    for stat in summary.files:
        if stat.binary:
            ctx.console.print(f"{escape(stat.file)} (binary)")
            continue
        ctx.console.print(
            f"- [bold]{escape(stat.file)}[/bold] +[green]{stat.insertions}[/green]/-[red]{stat.deletions}[/red]"
        )
        ctx.console.print(colorize_diff(ops.diff_text([stat.file]), indent="    "))
    return not summary.is_empty


async def run_and_classify(ctx: SyncContext, name: str, cmd: str, *, force: bool) -> CommandResult:
    """Run ``cmd`` in one clone and decide whether its changes are kept."""
    ctx.console.print(f"[blue]{name}[/blue] $ [yellow]{escape(cmd)}[/yellow]")
    try:
        result = await ctx.run(cmd, ctx.mirrors.path_for(name))
    except OSError as e:
        result = ProcessResult(exit_code=-1, stdout="", stderr=str(e))

    if not result.ok:
        log.warning("command_failed", repo=name, exit_code=result.exit_code)
        ctx.console.print(f"[red]Command failed in {name}[/red]")
        ctx.console.print(Text(result.stdout, style="red"))
        ctx.console.print(Text(result.stderr, style="red"))
        return "failed"

    try:
        changed = show_changes(ctx, name)
    except (GitError, pygit2.GitError) as e:
        log.error("diff_failed", repo=name, error=str(e))
        status(f"Could not diff {name}: {escape(str(e))}", style="error")
        return "failed"

    if not changed:
        ctx.console.print("[yellow]No changes[/yellow]")
        return "dismissed"
    if force or await prompts.confirm("Do you want to stage these changes?"):
        return "staged"
    return "dismissed"


async def sync_cmd(
    ctx: SyncContext,
    query: str | None,
    cmd: str | None,
    *,
    force: bool = False,
) -> dict[str, CommandResult]:
    """Query, select, run, review, then commit and push the staged repos."""
    if not query:
        raise SyncError.missing_argument("query", "--query")
    if not cmd:
        raise SyncError.missing_argument("cmd", "--cmd")

    relevant = await refresh_and_query(ctx, query)
    if not relevant:
        status(f"No repos match the query {escape(query)}", style="warning")
        return {}

    urls = {r.name: r.url for r in relevant}
    targets = await select_repos(list(urls), message="Select repos to run commands in")

    results: dict[str, CommandResult] = {}
    for name in targets:
        results[name] = await run_and_classify(ctx, name, cmd, force=force)

    counts = Counter(results.values())
    ctx.console.print(
        f"\n[green]{counts['staged']}[/green] repos staged, [red]{counts['failed']}[/red] failed, "
        f"[yellow]{counts['dismissed']}[/yellow] dismissed\n"
    )

    staged = [name for name, result in results.items() if result == "staged"]
    if not staged:
        ctx.console.print("[red]No repos were staged with changes[/red]")
        return results

    ctx.console.print("[green]Staged repos:[/green]")
    for name in staged:
        ctx.console.print(f"- [green]{name}[/green]")

    if not await prompts.confirm("Do you want to commit and push these changes?"):
        ctx.console.print("[red]Aborting![/red]")
        return results

    message = await ask_commit_message()
    await push_changes(ctx, staged, message, urls=urls)
    return results
