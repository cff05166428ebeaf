"""Top-level sync-replace menu."""

from __future__ import annotations

from typing import Literal

import questionary

from teamsync.core.formatting import pluralize
from teamsync.sync import prompts
from teamsync.sync.commit import commit_tracked
from teamsync.sync.context import SyncContext
from teamsync.sync.replace import prompt_options, sync_replace
from teamsync.sync.session import open_in_editor, rediff, reset, review, run_tracked, show_status

MenuAction = Literal["status", "new", "review", "rediff", "open", "run", "reset", "commit"]


async def choose_action(ctx: SyncContext) -> MenuAction:
    """Show the session summary and ask what to do next.

    With nothing tracked the clones are refreshed first, since a new
    search is the likely next step.
    """
    state = ctx.session.load()
    repos = state.tracked_repos()
    files = sum(len(state.files_for(r)) for r in repos)

    ctx.console.print("[blue]Sync Replace[/blue]\n")
    if repos:
        ctx.console.print(
            f"[yellow]{pluralize(len(repos), 'repo')} with {pluralize(files, 'tracked file')}[/yellow]\n"
        )
    else:
        await ctx.mirrors.ensure_all(await ctx.list_repos())

    choices = [
        questionary.Choice("Status - show tracked files", value="status"),
        questionary.Choice("Start new - run a new search/replace", value="new"),
    ]
    if repos:
        choices += [
            questionary.Choice("Review - go through each file, keep or undo", value="review"),
            questionary.Choice("Rediff - find and add new changes from tracked repos", value="rediff"),
            questionary.Choice("Open in editor - open all tracked repos", value="open"),
            questionary.Choice("Run command - run a command in tracked repos", value="run"),
        ]
    choices += [
        questionary.Choice("Reset - clear all tracked files", value="reset"),
        questionary.Choice("Commit and push - commit all tracked files", value="commit"),
    ]
    action: MenuAction = await prompts.select("What do you want to do?", choices)
    return action


async def run_action(ctx: SyncContext, action: MenuAction) -> None:
    if action == "status":
        show_status(ctx)
    elif action == "new":
        options, file_pattern, repo_type = await prompt_options(ctx)
        await sync_replace(ctx, options, file_pattern, repo_type)
    elif action == "review":
        await review(ctx)
    elif action == "rediff":
        await rediff(ctx)
    elif action == "open":
        await open_in_editor(ctx)
    elif action == "run":
        await run_tracked(ctx)
    elif action == "reset":
        reset(ctx)
    elif action == "commit":
        await commit_tracked(ctx)


async def sync_replace_menu(ctx: SyncContext) -> None:
    await run_action(ctx, await choose_action(ctx))
