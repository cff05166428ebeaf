"""Tests for tsm config."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from teamsync.cli import config as cmd
from teamsync.cli.main import cli
from teamsync.config.user_config import load_user_config

runner = CliRunner()


@pytest.fixture
def user_path(tmp_path: Path):
    path = tmp_path / "user.yaml"
    with patch.object(cmd, "USER_CONFIG_PATH", path):
        yield path


class TestConfigCommand:
    def test_show_without_file(self, user_path: Path) -> None:
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0
        assert not user_path.exists()

    def test_sets_values(self, user_path: Path) -> None:
        result = runner.invoke(cli, ["config", "--team", "core", "--org", "acme", "--log-level", "debug"])
        assert result.exit_code == 0, result.output
        saved = load_user_config(user_path)
        assert saved.team == "core"
        assert saved.org == "acme"
        assert saved.log_level == "DEBUG"

    def test_keeps_other_values(self, user_path: Path) -> None:
        runner.invoke(cli, ["config", "--team", "core"])
        runner.invoke(cli, ["config", "--editor", "idea"])
        saved = load_user_config(user_path)
        assert saved.team == "core"
        assert saved.editor == "idea"

    def test_broken_file(self, user_path: Path) -> None:
        user_path.write_text("- not a mapping\n")
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 1
