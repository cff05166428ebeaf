"""teamsync CLI - tsm command."""

import click

from teamsync.cli.config import config_command
from teamsync.cli.distroless import distroless_command
from teamsync.cli.kafka import kafka_config_command
from teamsync.cli.query import repo_query_command
from teamsync.cli.secret import secret_command
from teamsync.cli.sync_cmd import sync_cmd_command
from teamsync.cli.sync_file import sync_file_command
from teamsync.cli.sync_replace import sync_replace_command


@click.group()
@click.version_option(version="0.1.0", prog_name="tsm")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """teamsync - Synchronized changes across a team's GitHub repositories."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


cli.add_command(config_command, name="config")
cli.add_command(sync_replace_command, name="sync-replace")
cli.add_command(sync_cmd_command, name="sync-cmd")
cli.add_command(repo_query_command, name="repo-query")
cli.add_command(sync_file_command, name="sync-file")
cli.add_command(distroless_command, name="distroless")
cli.add_command(secret_command, name="secret")
cli.add_command(kafka_config_command, name="kafka-config")


if __name__ == "__main__":
    cli()
