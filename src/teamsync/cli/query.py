"""tsm repo-query command."""

import click

from teamsync.cli.utils import load_context, run_async
from teamsync.fleet.query import repo_query


@click.command()
@click.argument("query")
@click.pass_context
def repo_query_command(ctx: click.Context, query: str) -> None:
    """List team repos where the shell command QUERY exits 0.

    Example: tsm repo-query "grep -q kotlin build.gradle.kts"
    """
    run_async(repo_query(load_context(ctx), query))
