"""Copy one file from a source repo into many target repos."""

from __future__ import annotations

import shutil
from pathlib import Path

import questionary
from rich.markup import escape

from teamsync.core.errors import SyncError
from teamsync.core.formatting import pluralize
from teamsync.core.logging import get_logger
from teamsync.fleet.query import refresh_and_query
from teamsync.git.ops import GitOps
from teamsync.sync import prompts
from teamsync.sync.commit import ask_commit_message, push_changes
from teamsync.sync.context import SyncContext
from teamsync.sync.repos import select_repos

log = get_logger("fleet.sync_file")

WELCOME = """
 Welcome to [red]Interactive File Sync[/red]!

 We will pick a file from one repo and copy it to other repos.

 The steps are:
   1. Select source repo
   2. Select file to sync
   3. Select target repos
   4. Write commit message
   5. Confirm
"""


async def ask_source_file(ctx: SyncContext, source: str) -> str:
    """Ask for a repo-relative path until it names a file in the source clone."""
    root = ctx.mirrors.path_for(source)
    default = ""
    while True:
        answer = (
            await prompts.text(
                f"Which file in {source} should be synced across? (path from the repo root)",
                default=default,
            )
        ).strip()
        if answer and (root / answer).is_file():
            return answer
        ctx.console.print(f"[red]Could not find file {escape(answer)} in {source}[/red]")
        default = answer


def copy_file(source_dir: Path, target_dir: Path, file: str) -> None:
    target = target_dir / file
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source_dir / file, target)


async def sync_file(ctx: SyncContext, query: str | None) -> list[str]:
    """Interactive file sync. Returns the repos that were pushed."""
    if not query:
        raise SyncError.missing_argument("query", "--query")

    relevant = await refresh_and_query(ctx, query)
    ctx.console.print(WELCOME)
    ctx.console.print(
        f"! Your query [yellow]{escape(query)}[/yellow] matched [green]{pluralize(len(relevant), 'repo')}[/green]"
    )
    if not relevant:
        return []

    source: str = await prompts.select(
        "Select source repository",
        [questionary.Choice(r.name, value=r.name) for r in relevant],
        search=True,
    )
    file = await ask_source_file(ctx, source)

    others = [r for r in relevant if r.name != source]
    if not others:
        ctx.console.print("[yellow]No other repos to copy to[/yellow]")
        return []
    urls = {r.name: r.url for r in others}
    targets = await select_repos(list(urls), message="Select repos to copy file to")

    message = await ask_commit_message()

    ctx.console.print(f'The file "[yellow]{escape(file)}[/yellow]" will be synced across the following repos:')
    for name in targets:
        ctx.console.print(f" - {name}")
    ctx.console.print(f'The commit message will be "[yellow]{escape(message)}[/yellow]"')

    if not await prompts.confirm(
        f"Do you want to continue? This will create {pluralize(len(targets), 'commit')}, one for each repo."
    ):
        ctx.console.print("[red]Aborting![/red]")
        return []

    source_dir = ctx.mirrors.path_for(source)

    def copy_and_stage(ops: GitOps, name: str) -> None:
        ctx.console.print(f"Copying [yellow]{name}/{escape(file)}[/yellow] from [yellow]{source}[/yellow]")
        copy_file(source_dir, ops.path, file)
        ops.stage([file])

    pushed, failed = await push_changes(ctx, targets, message, stage=copy_and_stage, urls=urls)
    if failed:
        log.warning("sync_file_failures", failed=failed)
    return pushed
