"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from teamsync.config.models import LoggingConfig, LogOutputConfig
from teamsync.core.logging import (
    ConsoleSuppressingFilter,
    clear_run_id,
    configure_logging,
    get_log_file_path,
    get_logger,
    get_run_id,
    set_run_id,
)


@pytest.fixture(autouse=True)
def _reset_logging():
    clear_run_id()
    yield
    clear_run_id()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()


class TestRunIdCorrelation:
    """Run ID context variable tests."""

    def test_given_run_id_when_set_then_can_retrieve(self) -> None:
        assert set_run_id("run-123") == "run-123"
        assert get_run_id() == "run-123"

    def test_given_no_id_when_set_then_generates_one(self) -> None:
        rid = set_run_id()
        assert len(rid) == 12

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        set_run_id("to-clear")
        clear_run_id()
        assert get_run_id() is None


class TestConfigureLogging:
    """File and console outputs."""

    def test_json_file_output_has_run_id(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "tsm.log"
        configure_logging(
            config=LoggingConfig(
                level="DEBUG",
                outputs=[LogOutputConfig(format="json", destination=str(log_file))],
            )
        )
        set_run_id("abc")

        get_logger("test").info("pushed", repo="svc")
        logging.getLogger().handlers[0].flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["event"] == "pushed"
        assert record["repo"] == "svc"
        assert record["run_id"] == "abc"
        assert record["logger"] == "test"
        assert get_log_file_path() == log_file

    def test_console_output_suppressed(self) -> None:
        configure_logging(config=LoggingConfig(outputs=[LogOutputConfig(destination="stderr")]))
        handler = logging.getLogger().handlers[0]
        assert any(isinstance(f, ConsoleSuppressingFilter) for f in handler.filters)
        assert get_log_file_path() is None

    def test_output_level_overrides_root(self, tmp_path: Path) -> None:
        log_file = tmp_path / "tsm.log"
        configure_logging(
            config=LoggingConfig(
                level="DEBUG",
                outputs=[LogOutputConfig(format="json", destination=str(log_file), level="WARNING")],
            )
        )
        log = get_logger("test")
        log.info("quiet")
        log.warning("loud")
        logging.getLogger().handlers[0].flush()

        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
        assert events == ["loud"]

    def test_reconfigure_replaces_handlers(self, tmp_path: Path) -> None:
        configure_logging(level="INFO")
        configure_logging(level="INFO")
        assert len(logging.getLogger().handlers) == 1
