"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TEAMSYNC__SECTION__KEY)
3. User config (~/.config/teamsync/user.yaml, written by `tsm config`)
4. Global YAML (~/.config/teamsync/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    TEAMSYNC__<SECTION>__<KEY>=<VALUE>

Examples:
    TEAMSYNC__LOGGING__LEVEL=DEBUG
    TEAMSYNC__GITHUB__TEAM=platform
    TEAMSYNC__SYNC__RUN_CONCURRENCY=8
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _default_cache_dir() -> Path:
    base = os.environ.get("XDG_CACHE_HOME") or "~/.cache"
    return Path(base).expanduser() / "teamsync"


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TEAMSYNC__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG also logs every git and shell call.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class GitHubConfig(BaseModel):
    """GitHub organization and API access.

    Env vars:
        TEAMSYNC__GITHUB__ORG: Organization login
        TEAMSYNC__GITHUB__TEAM: Team slug whose repositories are operated on
        TEAMSYNC__GITHUB__TOKEN: API token (falls back to GITHUB_TOKEN, then `gh auth token`)
    """

    org: str | None = Field(
        default=None,
        description="GitHub organization login owning the team.",
    )
    team: str | None = Field(
        default=None,
        description="Team slug. Set once with: tsm config --team <slug>",
    )
    api_url: str = Field(
        default="https://api.github.com/graphql",
        description="GraphQL endpoint. Override for GitHub Enterprise.",
    )
    token: SecretStr | None = Field(
        default=None,
        description="API token. Prefer GITHUB_TOKEN or the gh CLI over storing it in YAML.",
    )
    clone_protocol: Literal["ssh", "https"] = Field(
        default="ssh",
        description="Protocol used for mirror clones. ssh uses the running ssh-agent.",
    )
    ignored_repos: list[str] = Field(
        default_factory=list,
        description="Repository names never included in team listings.",
    )
    timeout_sec: float = Field(
        default=30.0,
        description="HTTP timeout for GitHub API calls.",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_sec must be positive, got {v}")
        return v


class CacheConfig(BaseModel):
    """Local cache layout.

    Env vars:
        TEAMSYNC__CACHE__DIR: Root directory for mirrors, session state and logs
    """

    dir: Path = Field(
        default_factory=_default_cache_dir,
        description="Holds repos/ (mirror clones), session state, input history and the log file.",
    )

    @field_validator("dir")
    @classmethod
    def expand_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @property
    def repos_dir(self) -> Path:
        return self.dir / "repos"

    @property
    def state_file(self) -> Path:
        return self.dir / "sync-replace-state.json"

    @property
    def history_file(self) -> Path:
        return self.dir / "sync-replace-history.json"

    @property
    def log_file(self) -> Path:
        return self.dir / "teamsync.log"


class SyncConfig(BaseModel):
    """sync-replace / sync-cmd behaviour.

    Env vars:
        TEAMSYNC__SYNC__CONTEXT_LINES: Context lines shown around each match
        TEAMSYNC__SYNC__RUN_CONCURRENCY: Parallel repos for `sync-replace run`
        TEAMSYNC__SYNC__EDITOR: Command used to open tracked repos
    """

    context_lines: int = Field(default=10, ge=0)
    run_concurrency: int = Field(default=4, ge=1)
    history_size: int = Field(default=20, ge=1)
    failure_tail_lines: int = Field(
        default=5,
        ge=1,
        description="Non-blank output lines kept per failed repo in run summaries.",
    )
    editor: str = Field(
        default="code",
        description="Editor command that accepts several directories as arguments.",
    )


class TeamSyncConfig(BaseModel):
    """Root configuration for teamsync.

    All settings can be configured via:
    1. Environment variables: TEAMSYNC__SECTION__KEY
    2. YAML config files (user or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
