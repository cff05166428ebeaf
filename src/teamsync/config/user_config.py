"""Minimal user-facing configuration.

Only the handful of fields an operator sets by hand live here. They are
stored in ~/.config/teamsync/user.yaml and written by `tsm config`.
Everything else uses the defaults in models.py or the global config.yaml.
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from teamsync.core.errors import ConfigError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_EDITOR = "code"
DEFAULT_LOG_LEVEL: LogLevel = "INFO"

USER_CONFIG_PATH = Path("~/.config/teamsync/user.yaml").expanduser()


class UserConfig(BaseModel):
    """User-facing configuration options."""

    team: str | None = Field(
        default=None,
        description="GitHub team slug. Set with: tsm config --team <slug>",
    )
    org: str | None = Field(
        default=None,
        description="GitHub organization login. Set with: tsm config --org <login>",
    )
    editor: str = Field(
        default=DEFAULT_EDITOR,
        description="Command used by `tsm sync-replace open`.",
    )
    log_level: LogLevel = Field(
        default=DEFAULT_LOG_LEVEL,
        description="Log level for the log file. DEBUG is very verbose.",
    )


def write_user_config(path: Path, config: UserConfig | None = None) -> None:
    """Write user config file with helpful comments.

    Args:
        path: Path to write user.yaml
        config: Config values (uses defaults if None)
    """
    cfg = config or UserConfig()

    lines = [
        "# teamsync user configuration",
        "# Edit by hand or with: tsm config --team <slug> --org <login>",
        "",
    ]

    lines.append("# GitHub team whose repositories are synced")
    lines.append(f"team: {cfg.team}" if cfg.team else "# team: my-team")
    lines.append("")

    lines.append("# GitHub organization owning the team")
    lines.append(f"org: {cfg.org}" if cfg.org else "# org: my-org")
    lines.append("")

    lines.append("# Editor used to open tracked repos (must accept several directories)")
    if cfg.editor != DEFAULT_EDITOR:
        lines.append(f"editor: {cfg.editor}")
    else:
        lines.append(f"# editor: {cfg.editor}")
    lines.append("")

    lines.append("# Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL")
    if cfg.log_level != DEFAULT_LOG_LEVEL:
        lines.append(f"log_level: {cfg.log_level}")
    else:
        lines.append(f"# log_level: {cfg.log_level}")
    lines.append("")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines))


def load_user_config(path: Path) -> UserConfig:
    """Load user config from YAML file. Missing file yields defaults."""
    if not path.exists():
        return UserConfig()
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    try:
        return UserConfig(**data)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
