"""Run one shell command in many clones with a live status board."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from teamsync.core.formatting import tail_lines
from teamsync.core.logging import get_logger
from teamsync.core.progress import get_console
from teamsync.shell import CommandRunner, ProcessResult, run_command

log = get_logger("sync.runner")

RunStatus = Literal["pending", "running", "succeeded", "failed"]

DEFAULT_CONCURRENCY = 4
DEFAULT_TAIL_LINES = 5


@dataclass(slots=True)
class RunOutcome:
    """Progress and result of the command in one repo."""

    repo: str
    status: RunStatus = "pending"
    exit_code: int | None = None
    output_tail: list[str] = field(default_factory=list)


def failure_tail(result: ProcessResult, count: int = DEFAULT_TAIL_LINES) -> list[str]:
    """Last non-blank lines of stderr, or of stdout when stderr is empty."""
    return tail_lines(result.stderr, count) or tail_lines(result.stdout, count) or ["(no output)"]


def render_board(outcomes: list[RunOutcome]) -> RenderableType:
    grid = Table.grid(padding=(0, 1))
    grid.add_column(width=3, justify="right")
    grid.add_column()
    for o in outcomes:
        icon: RenderableType
        if o.status == "running":
            icon = Spinner("dots", style="yellow")
        elif o.status == "succeeded":
            icon = Text("✓", style="green")
        elif o.status == "failed":
            icon = Text("✗", style="red")
        else:
            icon = Text("○", style="dim")
        grid.add_row(icon, Text(o.repo, style="dim" if o.status == "pending" else ""))

    succeeded = sum(o.status == "succeeded" for o in outcomes)
    failed = sum(o.status == "failed" for o in outcomes)
    pending = len(outcomes) - succeeded - failed
    summary = Text("  ")
    summary.append(f"{succeeded} ")
    summary.append("✓", style="green")
    summary.append(f"  {failed} ")
    summary.append("✗", style="red")
    if pending:
        summary.append(f"  {pending} pending", style="dim")
    return Group(grid, Text(""), summary)


async def run_in_repos(
    command: str,
    repos: Mapping[str, Path],
    *,
    run: CommandRunner = run_command,
    concurrency: int = DEFAULT_CONCURRENCY,
    console: Console | None = None,
    tail: int = DEFAULT_TAIL_LINES,
) -> list[RunOutcome]:
    """Run ``command`` in every clone, at most ``concurrency`` at a time.

    A failing repo never stops the others. Failed repos are listed with the
    tail of their output once every repo has finished.
    """
    console = console or get_console()
    outcomes = [RunOutcome(name) for name in repos]
    semaphore = asyncio.Semaphore(concurrency)

    async def run_one(outcome: RunOutcome) -> None:
        async with semaphore:
            outcome.status = "running"
            try:
                result = await run(command, repos[outcome.repo])
            except OSError as e:
                log.error("run_failed", repo=outcome.repo, command=command, error=str(e))
                result = ProcessResult(-1, "", str(e))
            outcome.exit_code = result.exit_code
            if result.ok:
                outcome.status = "succeeded"
            else:
                outcome.status = "failed"
                outcome.output_tail = failure_tail(result, tail)
            log.info("run_done", repo=outcome.repo, command=command, exit_code=result.exit_code)

    console.print(f"\n[blue]Running [yellow]{escape(command)}[/yellow] in {len(outcomes)} repo(s)[/blue]\n")
    with Live(
        get_renderable=lambda: render_board(outcomes),
        console=console,
        refresh_per_second=12,
    ):
        await asyncio.gather(*(run_one(o) for o in outcomes))

    failed = [o for o in outcomes if o.status == "failed"]
    if failed:
        console.print("\n[red]Failed:[/red]\n")
        for o in failed:
            console.print(f"[red]  {o.repo}:[/red]", highlight=False)
            for line in o.output_tail:
                console.print(Text(f"    {line}", style="dim"))
            console.print()
    return outcomes
