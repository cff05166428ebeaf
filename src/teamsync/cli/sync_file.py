"""tsm sync-file command."""

import click

from teamsync.cli.utils import load_context, run_async
from teamsync.fleet.sync_file import sync_file


@click.command()
@click.option("--query", help="Shell command; repos where it exits 0 are candidates")
@click.pass_context
def sync_file_command(ctx: click.Context, query: str | None) -> None:
    """Copy a file from one repo to others, one commit per repo."""
    run_async(sync_file(load_context(ctx), query))
