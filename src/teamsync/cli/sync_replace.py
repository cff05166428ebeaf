"""tsm sync-replace command group."""

from __future__ import annotations

from typing import cast

import click

from teamsync.cli.utils import load_context, run_async
from teamsync.sync.applier import ReplaceOptions
from teamsync.sync.commit import commit_tracked
from teamsync.sync.matching import DEFAULT_FILE_PATTERN
from teamsync.sync.menu import sync_replace_menu
from teamsync.sync.replace import prompt_options, sync_replace
from teamsync.sync.repos import REPO_TYPES, RepoType
from teamsync.sync.session import open_in_editor, rediff, reset, review, run_tracked, show_status


@click.group(invoke_without_command=True)
@click.pass_context
def sync_replace_command(ctx: click.Context) -> None:
    """Search and replace across team repos, tracking changes until commit.

    Without a subcommand, shows an interactive menu.
    """
    if ctx.invoked_subcommand is None:
        run_async(sync_replace_menu(load_context(ctx)))


@sync_replace_command.command("new")
@click.option("--start", "start_pattern", help="Start pattern. Omit to be prompted for every input")
@click.option("--end", "end_pattern", help="End pattern; matches span from start to end")
@click.option("--replacement", help="Replacement text")
@click.option("--delete", is_flag=True, help="Delete matches instead of replacing them")
@click.option("--files", "file_pattern", default=DEFAULT_FILE_PATTERN, show_default=True, help="File glob")
@click.option("--repo-type", type=click.Choice(REPO_TYPES), default="all", show_default=True)
@click.option("--exclude-start", is_flag=True, help="Keep the line matching the start pattern")
@click.option("--exclude-end", is_flag=True, help="Keep the line matching the end pattern")
@click.option("--inline", is_flag=True, help="Replace only the matched text of single-line matches")
@click.option("--force", is_flag=True, help="Apply every match without review")
@click.pass_context
def new_command(
    ctx: click.Context,
    start_pattern: str | None,
    end_pattern: str | None,
    replacement: str | None,
    delete: bool,
    file_pattern: str,
    repo_type: str,
    exclude_start: bool,
    exclude_end: bool,
    inline: bool,
    force: bool,
) -> None:
    """Run a new search/replace."""
    sctx = load_context(ctx)

    if start_pattern is None:

        async def interactive() -> None:
            options, files, kind = await prompt_options(sctx)
            await sync_replace(sctx, options, files, kind, force=force)

        run_async(interactive())
        return

    if not start_pattern:
        raise click.UsageError("--start cannot be empty")
    if delete and replacement is not None:
        raise click.UsageError("--replacement and --delete cannot be combined")
    if inline and end_pattern:
        raise click.UsageError("--inline only applies to single-line matches (no --end)")
    if (exclude_start or exclude_end) and not end_pattern:
        raise click.UsageError("--exclude-start/--exclude-end need --end")

    options = ReplaceOptions(
        start_pattern=start_pattern,
        end_pattern=end_pattern or None,
        replacement=None if delete else replacement,
        exclude_start=exclude_start,
        exclude_end=exclude_end,
        inline=inline,
    )
    run_async(sync_replace(sctx, options, file_pattern, cast(RepoType, repo_type), force=force))


@sync_replace_command.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """Show tracked files."""
    show_status(load_context(ctx))


@sync_replace_command.command("review")
@click.pass_context
def review_command(ctx: click.Context) -> None:
    """Go through each tracked file, keep or undo."""
    run_async(review(load_context(ctx)))


@sync_replace_command.command("rediff")
@click.pass_context
def rediff_command(ctx: click.Context) -> None:
    """Find and track new changes in tracked repos."""
    run_async(rediff(load_context(ctx)))


@sync_replace_command.command("commit")
@click.pass_context
def commit_command(ctx: click.Context) -> None:
    """Commit and push all tracked files."""
    run_async(commit_tracked(load_context(ctx)))


@sync_replace_command.command("reset")
@click.pass_context
def reset_command(ctx: click.Context) -> None:
    """Clear all tracked files. Working tree changes are left alone."""
    reset(load_context(ctx))


@sync_replace_command.command("run")
@click.option("--cmd", "command", help="Shell command to run in each tracked repo")
@click.pass_context
def run_cmd_command(ctx: click.Context, command: str | None) -> None:
    """Run a command in every tracked repo."""
    outcomes = run_async(run_tracked(load_context(ctx), command))
    if any(o.status == "failed" for o in outcomes):
        ctx.exit(1)


@sync_replace_command.command("open")
@click.pass_context
def open_command(ctx: click.Context) -> None:
    """Open every tracked repo in the configured editor."""
    run_async(open_in_editor(load_context(ctx)))
