"""Fleet test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from teamsync.git.models import DiffFileStat, DiffSummary, PushResult


def summary_of(*stats: DiffFileStat) -> DiffSummary:
    return DiffSummary(
        files=stats,
        insertions=sum(s.insertions for s in stats),
        deletions=sum(s.deletions for s in stats),
        changed=len(stats),
    )


@pytest.fixture
def fake_mirrors(sync_ctx):
    """Replace the mirror cache: no clones, per-repo MagicMock clients."""
    clients: dict[str, MagicMock] = {}

    def client(name: str) -> MagicMock:
        if name not in clients:
            ops = MagicMock()
            ops.diff_summary.return_value = summary_of(DiffFileStat("a.txt", 1, 0, False))
            ops.diff_text.return_value = "+a\n"
            ops.push.return_value = PushResult("origin", f"git@github.com:acme/{name}.git", "main")
            ops.path = sync_ctx.config.cache.repos_dir / name
            clients[name] = ops
        return clients[name]

    mirrors = MagicMock()
    mirrors.ensure_all = AsyncMock(return_value={})
    mirrors.client.side_effect = client
    mirrors.path_for.side_effect = lambda name: sync_ctx.config.cache.repos_dir / name
    sync_ctx.mirrors = mirrors
    return clients


@pytest.fixture
def clean_summary() -> DiffSummary:
    return summary_of()


@pytest.fixture
def summary():
    """``summary(*stats)`` builds a DiffSummary."""
    return summary_of
