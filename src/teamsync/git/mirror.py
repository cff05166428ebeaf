"""Local mirror clones of team repositories."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Sequence
from pathlib import Path
from typing import Literal

import pygit2

from teamsync.core.formatting import pluralize
from teamsync.core.logging import get_logger
from teamsync.core.progress import spinner, status
from teamsync.git.credentials import get_default_callbacks
from teamsync.git.errors import GitError
from teamsync.git.models import CloneOutcome
from teamsync.git.ops import GitOps
from teamsync.github.models import RepoRef

log = get_logger("git.mirror")


class MirrorCache:
    """Clones live under ``<root>/<repo name>``, one per repository."""

    def __init__(
        self,
        root: Path,
        *,
        protocol: Literal["ssh", "https"] = "ssh",
        token: str | None = None,
    ) -> None:
        self._root = root
        self._protocol = protocol
        self._token = token

    def path_for(self, name: str) -> Path:
        return self._root / name

    def is_cloned(self, name: str) -> bool:
        return (self.path_for(name) / ".git").exists()

    def clone_url(self, repo: RepoRef) -> str:
        if self._protocol == "ssh":
            return repo.ssh_url
        return f"{repo.url}.git"

    def client(self, name: str) -> GitOps:
        """Per-repo client for an existing clone."""
        return GitOps(self.path_for(name), token=self._token)

    def ensure_clone(self, repo: RepoRef, *, shallow: bool = True) -> CloneOutcome:
        """Clone ``repo`` if missing, otherwise bring it up to date.

        Never raises: failures are logged and reported as ``"failed"``.
        """
        path = self.path_for(repo.name)
        try:
            if not self.is_cloned(repo.name):
                self._root.mkdir(parents=True, exist_ok=True)
                pygit2.clone_repository(
                    self.clone_url(repo),
                    str(path),
                    checkout_branch=repo.default_branch,
                    depth=1 if shallow else 0,
                    callbacks=get_default_callbacks(self._token),
                )
                log.info("mirror_cloned", repo=repo.name, shallow=shallow)
                return "cloned"

            ops = self.client(repo.name)
            ops.fetch()
            moved = ops.fast_forward()
            log.info("mirror_updated", repo=repo.name, moved=moved)
            return "updated"
        except (GitError, pygit2.GitError, OSError) as e:
            log.error("mirror_failed", repo=repo.name, error=str(e), error_type=type(e).__name__)
            return "failed"

    async def ensure_all(
        self, repos: Sequence[RepoRef], *, shallow: bool = True
    ) -> dict[str, CloneOutcome]:
        """Clone or update every repo concurrently and print the counts."""
        with spinner(f"Updating {pluralize(len(repos), 'repo')}"):
            outcomes = await asyncio.gather(
                *(asyncio.to_thread(self.ensure_clone, repo, shallow=shallow) for repo in repos)
            )
        results = {repo.name: outcome for repo, outcome in zip(repos, outcomes, strict=True)}
        counts = Counter(results.values())
        status(f"Updated {counts['updated']} and cloned {counts['cloned']} repos", style="success")
        failed = sorted(name for name, outcome in results.items() if outcome == "failed")
        if failed:
            status(f"Failed to update: {', '.join(failed)}", style="warning")
        return results
