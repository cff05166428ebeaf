"""CLI utilities."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import click

from teamsync.config.loader import load_config
from teamsync.config.models import LoggingConfig, LogOutputConfig, TeamSyncConfig
from teamsync.core.errors import TeamSyncError
from teamsync.core.logging import (
    clear_run_id,
    configure_logging,
    get_log_file_path,
    get_logger,
    set_run_id,
)
from teamsync.git.errors import GitError
from teamsync.sync.context import SyncContext

T = TypeVar("T")

log = get_logger("cli")


def _error_message(message: str) -> str:
    log_path = get_log_file_path()
    if log_path is None:
        return message
    return f"{message}\nDetails in {log_path}"


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, turning domain errors into click errors.

    Ctrl-C anywhere (prompts, review, running commands) aborts the command.
    """
    try:
        return asyncio.run(coro)
    except TeamSyncError as e:
        log.error("command_failed", **e.to_dict())
        raise click.ClickException(_error_message(str(e))) from e
    except GitError as e:
        log.error("command_failed", error=str(e), error_type=type(e).__name__)
        raise click.ClickException(_error_message(str(e))) from e
    except KeyboardInterrupt:
        raise click.Abort() from None


def setup_logging(config: TeamSyncConfig, *, verbose: bool) -> None:
    """Suppressed console output plus a JSON log file in the cache dir."""
    level = "DEBUG" if verbose else config.logging.level
    outputs = list(config.logging.outputs)
    log_file = str(config.cache.log_file)
    if not any(o.destination == log_file for o in outputs):
        outputs.append(LogOutputConfig(format="json", destination=log_file))
    configure_logging(config=LoggingConfig(level=level, outputs=outputs))


def load_context(ctx: click.Context) -> SyncContext:
    """Load configuration, start logging and build the sync context.

    The context is built once per invocation and cached on ``ctx.obj``.
    """
    obj = ctx.ensure_object(dict)
    if "sync" in obj:
        return obj["sync"]  # type: ignore[no-any-return]
    try:
        config = load_config()
    except TeamSyncError as e:
        raise click.ClickException(str(e)) from e
    setup_logging(config, verbose=obj.get("verbose", False))
    run_id = set_run_id()
    ctx.call_on_close(clear_run_id)
    log.info("command_start", command=ctx.command_path, run_id=run_id)
    obj["sync"] = SyncContext.from_config(config)
    return obj["sync"]  # type: ignore[no-any-return]
