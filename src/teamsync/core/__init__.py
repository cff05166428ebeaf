"""Core module exports."""

from teamsync.core.errors import (
    ConfigError,
    ErrorCode,
    ExternalToolError,
    GitHubError,
    SyncError,
    TeamSyncError,
)
from teamsync.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from teamsync.core.progress import banner, get_console, spinner, status

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "ExternalToolError",
    "GitHubError",
    "SyncError",
    "TeamSyncError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "banner",
    "get_console",
    "spinner",
    "status",
]
