"""Tests for the kafka-config command.

Covers:
- APP is passed through to the flow
- --clean removes generated files without calling kubectl
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from teamsync.cli import kafka as cmd
from teamsync.cli.main import cli

runner = CliRunner()


@pytest.fixture
def with_context(sync_ctx):
    with patch.object(cmd, "load_context", return_value=sync_ctx):
        yield sync_ctx


class TestKafkaConfigCommand:
    """Tests for tsm kafka-config."""

    def test_app_passed_through(self, with_context) -> None:
        flow = AsyncMock(return_value=None)
        with patch.object(cmd, "kafka_config", flow):
            result = runner.invoke(cli, ["kafka-config", "orders"])
        assert result.exit_code == 0, result.output
        assert flow.await_args.args == (with_context, "orders")

    def test_clean(self, with_context) -> None:
        generated = with_context.config.cache.dir / "dev-gcp" / "orders" / ".secrets"
        generated.mkdir(parents=True)
        flow = AsyncMock()
        with patch.object(cmd, "kafka_config", flow):
            result = runner.invoke(cli, ["kafka-config", "--clean"])
        assert result.exit_code == 0, result.output
        assert not generated.exists()
        assert with_context.config.cache.repos_dir.is_dir()
        flow.assert_not_awaited()
