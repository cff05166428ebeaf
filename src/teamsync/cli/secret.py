"""tsm secret command."""

import click

from teamsync.cli.utils import load_context, run_async
from teamsync.fleet.secret import show_secret


@click.command()
@click.argument("name", required=False)
@click.pass_context
def secret_command(ctx: click.Context, name: str | None) -> None:
    """Print the decoded keys of a secret in the current kubectl context.

    NAME preselects the secret; a partial name filters the choices.
    """
    run_async(show_secret(load_context(ctx), name))
