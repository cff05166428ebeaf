"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides the sync context shared by the sync, fleet and cli tests.
"""

import io
import sys
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

# Insert local src directory at the beginning of sys.path
# This ensures that the local teamsync package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of teamsync modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("teamsync"):
        del sys.modules[module_name]

from teamsync.config.models import CacheConfig, GitHubConfig, TeamSyncConfig  # noqa: E402
from teamsync.git.mirror import MirrorCache  # noqa: E402
from teamsync.github.models import RepoRef  # noqa: E402
from teamsync.shell import ProcessResult  # noqa: E402
from teamsync.sync.context import SyncContext  # noqa: E402
from teamsync.sync.state import HistoryStore, SessionStore  # noqa: E402


def make_repo(name: str) -> RepoRef:
    return RepoRef(
        name=name,
        url=f"https://github.com/acme/{name}",
        ssh_url=f"git@github.com:acme/{name}.git",
        default_branch="main",
    )


@pytest.fixture
def config(tmp_path: Path) -> TeamSyncConfig:
    return TeamSyncConfig(
        cache=CacheConfig(dir=tmp_path / "cache"),
        github=GitHubConfig(org="acme", team="core"),
    )


@pytest.fixture
def sync_ctx(config: TeamSyncConfig) -> SyncContext:
    """Context with file-backed stores, a quiet console and no network."""
    config.cache.repos_dir.mkdir(parents=True)
    return SyncContext(
        config=config,
        session=SessionStore(config.cache.state_file),
        history=HistoryStore(config.cache.history_file),
        mirrors=MirrorCache(config.cache.repos_dir),
        list_repos=AsyncMock(return_value=[]),
        run=AsyncMock(return_value=ProcessResult(0, "", "")),
        console=Console(file=io.StringIO(), width=120),
    )


@pytest.fixture
def repo_factory() -> Callable[[str], RepoRef]:
    """Builds RepoRefs: ``repo_factory("svc")``."""
    return make_repo
