"""tsm config command - show or set user configuration."""

import click

from teamsync.config.user_config import USER_CONFIG_PATH, load_user_config, write_user_config
from teamsync.core.errors import TeamSyncError
from teamsync.core.progress import get_console, status


@click.command()
@click.option("--team", help="GitHub team slug whose repositories are synced")
@click.option("--org", help="GitHub organization login")
@click.option("--editor", help="Command that opens tracked repos")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Log level for the log file",
)
def config_command(team: str | None, org: str | None, editor: str | None, log_level: str | None) -> None:
    """Show the user configuration, or update it with the given options."""
    try:
        current = load_user_config(USER_CONFIG_PATH)
    except TeamSyncError as e:
        raise click.ClickException(str(e)) from e

    updates = {
        key: value
        for key, value in (("team", team), ("org", org), ("editor", editor), ("log_level", log_level))
        if value is not None
    }
    if updates:
        if "log_level" in updates:
            updates["log_level"] = updates["log_level"].upper()
        current = current.model_copy(update=updates)
        write_user_config(USER_CONFIG_PATH, current)
        status(f"Saved {USER_CONFIG_PATH}", style="success")

    console = get_console()
    console.print(f"team:      {current.team or '[dim](not set)[/dim]'}")
    console.print(f"org:       {current.org or '[dim](not set)[/dim]'}")
    console.print(f"editor:    {current.editor}")
    console.print(f"log_level: {current.log_level}")
