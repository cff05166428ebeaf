"""Config module exports."""

from teamsync.config.loader import load_config, require_org, require_team
from teamsync.config.models import (
    CacheConfig,
    GitHubConfig,
    LoggingConfig,
    LogOutputConfig,
    SyncConfig,
    TeamSyncConfig,
)

__all__ = [
    "load_config",
    "require_org",
    "require_team",
    "CacheConfig",
    "GitHubConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "SyncConfig",
    "TeamSyncConfig",
]
