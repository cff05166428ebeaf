"""tsm distroless command."""

import click

from teamsync.cli.utils import load_context, run_async
from teamsync.fleet.distroless import update_distroless


@click.command()
@click.argument("distroless_type", metavar="TYPE")
@click.pass_context
def distroless_command(ctx: click.Context, distroless_type: str) -> None:
    """Pin the distroless base image of TYPE to its newest digest.

    TYPE is one of: java21, node24.
    """
    run_async(update_distroless(load_context(ctx), distroless_type))
