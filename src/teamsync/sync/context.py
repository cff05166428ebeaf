"""Everything a sync operation needs, passed explicitly."""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import partial

from rich.console import Console

from teamsync.config.models import TeamSyncConfig
from teamsync.core.progress import get_console
from teamsync.git.mirror import MirrorCache
from teamsync.github.client import fetch_team_repositories
from teamsync.github.models import RepoRef
from teamsync.shell import CommandRunner, run_command
from teamsync.sync.state import HistoryStore, SessionStore

RepoLister = Callable[[], Awaitable[list[RepoRef]]]


@dataclass(slots=True)
class SyncContext:
    """Stores and collaborators shared by the sync-replace and fleet commands."""

    config: TeamSyncConfig
    session: SessionStore
    history: HistoryStore
    mirrors: MirrorCache
    list_repos: RepoLister
    run: CommandRunner = run_command
    console: Console = field(default_factory=get_console)

    @classmethod
    def from_config(cls, config: TeamSyncConfig) -> SyncContext:
        token = config.github.token.get_secret_value() if config.github.token else None
        return cls(
            config=config,
            session=SessionStore(config.cache.state_file),
            history=HistoryStore(config.cache.history_file, limit=config.sync.history_size),
            mirrors=MirrorCache(
                config.cache.repos_dir,
                protocol=config.github.clone_protocol,
                token=token or os.environ.get("GITHUB_TOKEN"),
            ),
            list_repos=partial(fetch_team_repositories, config),
        )
