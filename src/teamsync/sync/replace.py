"""The sync-replace "new" flow: search, select, review, write, track."""

from __future__ import annotations

import asyncio

import questionary
from rich.markup import escape

from teamsync.core.formatting import pluralize
from teamsync.core.logging import get_logger
from teamsync.core.progress import banner, spinner, status
from teamsync.sync import prompts
from teamsync.sync.applier import ReplaceOptions, apply_approved_changes
from teamsync.sync.commit import commit_tracked
from teamsync.sync.context import SyncContext
from teamsync.sync.matching import DEFAULT_FILE_PATTERN, FileChange, MatchSpan, find_matches_in_repo
from teamsync.sync.repos import RepoType, is_repo_of_type, select_repos
from teamsync.sync.review import ExtraLinePattern, review_match
from teamsync.sync.state import SessionState
from teamsync.sync.terminal import ConsoleTerminal, KeySource, PromptToolkitKeys, Terminal

log = get_logger("sync.replace")


async def prompt_options(ctx: SyncContext) -> tuple[ReplaceOptions, str, RepoType]:
    """Ask for every sync-replace input, recording answers in the input history."""
    history = ctx.history.load()

    start = ""
    while not start:
        start = await prompts.text_with_history("Enter start pattern:", history.start_pattern)
    ctx.history.record("start_pattern", start)

    end = (
        await prompts.text_with_history(
            "Enter end pattern (leave empty for single line match):", history.end_pattern
        )
    ).strip()
    if end:
        ctx.history.record("end_pattern", end)

    exclude_start = exclude_end = inline = False
    if end:
        excluded = await prompts.checkbox(
            "Exclude boundaries from replacement?",
            [
                questionary.Choice("Exclude start line (keep line matching start pattern)", value="start"),
                questionary.Choice("Exclude end line (keep line matching end pattern)", value="end"),
            ],
        )
        exclude_start = "start" in excluded
        exclude_end = "end" in excluded
    else:
        inline = await prompts.confirm(
            "Replace only the matched string (inline)? (No = replace entire line)", default=False
        )

    replacement: str | None = None
    if await prompts.confirm("Do you want to replace matches? (No = delete matches)", default=True):
        replacement = await prompts.replacement_input("Enter replacement text:", history.replacement)
    if replacement:
        ctx.history.record("replacement", replacement)

    file_pattern = await prompts.text_with_history(
        "Enter file pattern:", history.file_pattern, default=DEFAULT_FILE_PATTERN
    )
    ctx.history.record("file_pattern", file_pattern)

    repo_type: RepoType = await prompts.select(
        "Filter repos by type:",
        [
            questionary.Choice("All repos", value="all"),
            questionary.Choice("JVM repos (Gradle/Kotlin/Java)", value="jvm"),
            questionary.Choice("Node repos (package.json)", value="node"),
        ],
    )

    options = ReplaceOptions(
        start_pattern=start,
        end_pattern=end or None,
        replacement=replacement,
        exclude_start=exclude_start,
        exclude_end=exclude_end,
        inline=inline,
    )
    return options, file_pattern, repo_type


def _print_parameters(ctx: SyncContext, options: ReplaceOptions, file_pattern: str, repo_type: RepoType) -> None:
    c = ctx.console
    c.print("[blue]Sync Replace[/blue]")
    c.print(f"[dim]Start pattern: {escape(options.start_pattern)}[/dim]")
    c.print(f"[dim]End pattern: {escape(options.end_pattern or '(single line match)')}[/dim]")
    if options.end_pattern and (options.exclude_start or options.exclude_end):
        excluded = [name for name, on in (("start", options.exclude_start), ("end", options.exclude_end)) if on]
        c.print(f"[dim]Exclude: {', '.join(excluded)}[/dim]")
    if options.inline:
        c.print("[dim]Mode: inline (replace matched string only)[/dim]")
    c.print(f"[dim]Replacement: {escape(options.replacement or '(delete matches)')}[/dim]")
    c.print(f"[dim]File pattern: {escape(file_pattern)}[/dim]")
    c.print(f"[dim]Repo type: {repo_type}[/dim]")
    c.print()


def _count(changes: list[FileChange]) -> int:
    return sum(len(c.matches) for c in changes)


async def find_repo_matches(
    ctx: SyncContext,
    names: list[str],
    options: ReplaceOptions,
    file_pattern: str,
    repo_type: RepoType,
) -> dict[str, list[FileChange]]:
    """Scan each clone of the given type; repos without matches are left out."""
    found: dict[str, list[FileChange]] = {}
    with spinner(f"Searching {pluralize(len(names), 'repo')}"):
        for name in names:
            path = ctx.mirrors.path_for(name)
            if not path.is_dir():
                log.warning("repo_not_cloned", repo=name, path=str(path))
                continue
            if not is_repo_of_type(path, repo_type):
                continue
            changes = await asyncio.to_thread(
                find_matches_in_repo, path, options.start_pattern, options.end_pattern, file_pattern
            )
            if changes:
                found[name] = changes
    return found


async def sync_replace(
    ctx: SyncContext,
    options: ReplaceOptions,
    file_pattern: str = DEFAULT_FILE_PATTERN,
    repo_type: RepoType = "all",
    *,
    force: bool = False,
    terminal: Terminal | None = None,
    keys: KeySource | None = None,
) -> SessionState:
    """Search, review and rewrite matches across repos, then track the written files.

    Files of a repo are written only after all of its matches are reviewed,
    and the session is saved after each repo.
    """
    _print_parameters(ctx, options, file_pattern, repo_type)

    state = ctx.session.load()
    tracked = state.tracked_repos()
    search_tracked_only = False
    if tracked:
        status(f"[yellow]Active session: {pluralize(len(tracked), 'repo')} with tracked changes.[/yellow]\n")
        search_tracked_only = await prompts.confirm("Search only in tracked repos?", default=True)

    if search_tracked_only:
        names = tracked
        status(f"[dim]Searching in {pluralize(len(names), 'tracked repo')}...[/dim]\n")
    else:
        names = [r.name for r in await ctx.list_repos()]

    found = await find_repo_matches(ctx, names, options, file_pattern, repo_type)
    if not found:
        status("No matches found in any repository", style="warning")
        return state

    total = sum(_count(changes) for changes in found.values())
    ctx.console.print(
        f"[green]Found {pluralize(total, 'match', 'matches')} in {pluralize(len(found), 'repository', 'repositories')}:[/green]\n"
    )
    for name, changes in found.items():
        ctx.console.print(
            f"  [blue]{name}[/blue]: {pluralize(_count(changes), 'match', 'matches')} "
            f"in {pluralize(len(changes), 'file')}"
        )
    ctx.console.print()

    selected = await select_repos(list(found), tracked)

    terminal = terminal or ConsoleTerminal(ctx.console)
    if not force and keys is None:
        keys = PromptToolkitKeys()
    selected_total = sum(_count(found[name]) for name in selected)
    extra_lines: tuple[ExtraLinePattern, ...] = ()
    number = 0

    for name in selected:
        changes = found[name]
        approved: dict[str, list[MatchSpan]] = {}
        for change in changes:
            lines = change.original_content.split("\n")
            for span in change.matches:
                number += 1
                banner(f"[{number}/{selected_total}] {name} - {change.file}", console=ctx.console)
                outcome = await review_match(
                    lines,
                    span,
                    options,
                    terminal=terminal,
                    keys=None if force else keys,
                    extra_lines=extra_lines,
                    force=force,
                    context_lines=ctx.config.sync.context_lines,
                )
                if outcome.action == "apply":
                    approved.setdefault(change.file, []).append(outcome.approved(span))
                    extra_lines = outcome.extra_lines
                    ctx.console.print("[green]Approved[/green]")
                else:
                    ctx.console.print("[yellow]Skipped[/yellow]")

        if approved:
            written = apply_approved_changes(ctx.mirrors.path_for(name), changes, approved, options)
            state.track(name, written)
            state = ctx.session.save(state)

    repo_count = len(state.tracked_repos())
    banner(f"{pluralize(repo_count, 'repo')} with tracked changes", console=ctx.console)
    if not repo_count:
        return state

    choice = await prompts.select(
        "What do you want to do?",
        [
            questionary.Choice("Commit and push changes now", value="commit"),
            questionary.Choice("Save and exit (run more search/replace later)", value="exit"),
        ],
    )
    if choice == "commit":
        await commit_tracked(ctx)
        return ctx.session.load()

    status("[yellow]Changes saved locally and tracked for later commit.[/yellow]")
    status("[dim]Run [yellow]tsm sync-replace[/yellow] to add more changes.[/dim]")
    status("[dim]Run [yellow]tsm sync-replace commit[/yellow] to commit tracked files.[/dim]")
    return state
