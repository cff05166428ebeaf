"""Tests for CLI utilities.

Covers:
- run_async() error translation
- setup_logging() log file output
- load_context() caching and run id lifetime
"""

from __future__ import annotations

from unittest.mock import patch

import click
import pytest

from teamsync.cli import utils
from teamsync.cli.utils import load_context, run_async, setup_logging
from teamsync.config.models import LoggingConfig, LogOutputConfig
from teamsync.core.errors import SyncError
from teamsync.core.logging import get_run_id
from teamsync.git.errors import NothingToCommitError


class TestRunAsync:
    """Tests for run_async."""

    def test_returns_value(self) -> None:
        async def ok() -> int:
            return 7

        assert run_async(ok()) == 7

    def test_domain_error_becomes_click_exception(self) -> None:
        async def fail() -> None:
            raise SyncError.missing_argument("query", "--query")

        with patch.object(utils, "get_log_file_path", return_value=None):
            with pytest.raises(click.ClickException) as exc_info:
                run_async(fail())
        assert exc_info.value.message == "[4001] SYNC_MISSING_ARGUMENT: Missing query, use --query=..."

    def test_git_error_points_at_log(self, tmp_path) -> None:
        async def fail() -> None:
            raise NothingToCommitError()

        with patch.object(utils, "get_log_file_path", return_value=tmp_path / "teamsync.log"):
            with pytest.raises(click.ClickException) as exc_info:
                run_async(fail())
        assert f"Details in {tmp_path / 'teamsync.log'}" in exc_info.value.message

    def test_ctrl_c_aborts(self) -> None:
        async def interrupted() -> None:
            raise KeyboardInterrupt

        with pytest.raises(click.Abort):
            run_async(interrupted())


class TestSetupLogging:
    def test_adds_json_log_file(self, config) -> None:
        with patch.object(utils, "configure_logging") as configure:
            setup_logging(config, verbose=True)
        logging_config: LoggingConfig = configure.call_args.kwargs["config"]
        assert logging_config.level == "DEBUG"
        assert LogOutputConfig(format="json", destination=str(config.cache.log_file)) in logging_config.outputs

    def test_log_file_not_duplicated(self, config) -> None:
        config.logging.outputs.append(LogOutputConfig(format="json", destination=str(config.cache.log_file)))
        with patch.object(utils, "configure_logging") as configure:
            setup_logging(config, verbose=False)
        outputs = configure.call_args.kwargs["config"].outputs
        assert sum(o.destination == str(config.cache.log_file) for o in outputs) == 1


class TestLoadContext:
    def test_built_once(self, config) -> None:
        ctx = click.Context(click.Command("x"), obj={"verbose": False})
        with (
            patch.object(utils, "load_config", return_value=config) as load,
            patch.object(utils, "configure_logging"),
        ):
            first = load_context(ctx)
            second = load_context(ctx)
        assert first is second
        assert first.config is config
        load.assert_called_once()

    def test_run_id_cleared_when_context_closes(self, config) -> None:
        """Each invocation gets a run id that does not outlive it."""
        ctx = click.Context(click.Command("x"), obj={"verbose": False})
        with (
            patch.object(utils, "load_config", return_value=config),
            patch.object(utils, "configure_logging"),
        ):
            with ctx:
                load_context(ctx)
                assert get_run_id() is not None
        assert get_run_id() is None

    def test_config_error_is_click_error(self) -> None:
        from teamsync.core.errors import ConfigError

        ctx = click.Context(click.Command("x"))
        with patch.object(utils, "load_config", side_effect=ConfigError.parse_error("/x.yaml", "bad")):
            with pytest.raises(click.ClickException):
                load_context(ctx)
