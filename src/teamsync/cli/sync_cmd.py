"""tsm sync-cmd command - run a command across queried repos."""

import click

from teamsync.cli.utils import load_context, run_async
from teamsync.fleet.sync_cmd import sync_cmd


@click.command()
@click.option("--query", help="Shell command; repos where it exits 0 are candidates")
@click.option("--cmd", help="Shell command to run in each selected repo")
@click.option("--force", is_flag=True, help="Stage every changed repo without asking")
@click.pass_context
def sync_cmd_command(ctx: click.Context, query: str | None, cmd: str | None, force: bool) -> None:
    """Run CMD in every repo matching QUERY, review the diffs, then push."""
    run_async(sync_cmd(load_context(ctx), query, cmd, force=force))
