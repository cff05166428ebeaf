"""tsm kafka-config command."""

import click

from teamsync.cli.utils import load_context, run_async
from teamsync.core.formatting import pluralize
from teamsync.core.progress import status
from teamsync.fleet.kafka import kafka_config, remove_kafka_files


@click.command()
@click.argument("app", required=False)
@click.option("--clean", is_flag=True, help="Remove every generated Kafka config and secret")
@click.pass_context
def kafka_config_command(ctx: click.Context, app: str | None, clean: bool) -> None:
    """Write kcat, Java and Spring Boot Kafka configs for an app.

    Uses the Aiven credentials of the app's pods in the current kubectl
    context. APP preselects the app; a partial name filters the choices.
    """
    sctx = load_context(ctx)
    if clean:
        removed = remove_kafka_files(sctx.config.cache.dir)
        status(f"Removed Kafka files for {pluralize(len(removed), 'app')}", style="success")
        return
    run_async(kafka_config(sctx, app))
