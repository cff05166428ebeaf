"""Git operations via pygit2 - returns serializable data models."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import partial
from pathlib import Path

import pygit2

from teamsync.git._internal import (
    RepoAccess,
    WriteFlows,
    check_nothing_to_commit,
    require_clean_worktree,
    require_current_branch,
)
from teamsync.git._internal.constants import (
    STATUS_WT_DELETED,
    STATUS_WT_MODIFIED,
    STATUS_WT_NEW,
    STATUS_WT_RENAMED,
    STATUS_WT_TYPECHANGE,
)
from teamsync.git.credentials import SystemCredentialCallback, get_default_callbacks
from teamsync.git.errors import DivergedBranchError, PushRejectedError
from teamsync.git.models import DiffSummary, PushResult


class GitOps:
    """Per-clone client: stage, commit, push, diff and restore."""

    def __init__(
        self,
        repo_path: Path | str,
        *,
        token: str | None = None,
    ) -> None:
        self._access = RepoAccess(repo_path)
        self._flows = WriteFlows(self._access)
        self._token = token

    def _remote_callbacks(self) -> SystemCredentialCallback:
        return get_default_callbacks(self._token)

    @property
    def repo(self) -> pygit2.Repository:
        """
        Direct access to underlying pygit2 Repository.

        Escape hatch for advanced consumers. Bypasses GitOps error mapping
        and domain model conversion. Use with caution.
        """
        return self._access.repo

    @property
    def path(self) -> Path:
        """Repository root path."""
        return self._access.path

    # =========================================================================
    # Read Operations
    # =========================================================================

    def status(self) -> dict[str, int]:
        """Get status flags by path. Use pygit2.GIT_STATUS_* to interpret."""
        return self._access.status()

    def head_sha(self) -> str:
        return str(self._access.must_head_target())

    def diff_text(self, paths: Iterable[str | Path] | None = None) -> str:
        """Unified diff of HEAD against the working tree, optionally limited to paths."""
        diff = self._access.diff_head_to_workdir()
        if paths is None:
            return diff.patch or ""
        wanted = {self._access.normalize_path(p) for p in paths}
        return "".join(
            patch.text or ""
            for patch in diff
            if patch is not None and patch.delta.new_file.path in wanted
        )

    def diff_summary(self) -> DiffSummary:
        """Line counts of HEAD against the working tree."""
        return DiffSummary.from_pygit2(self._access.diff_head_to_workdir())

    def changed_files(self) -> list[str]:
        """Paths that differ from HEAD in the working tree, sorted."""
        return sorted(patch.delta.new_file.path for patch in self._access.diff_head_to_workdir())

    # =========================================================================
    # Write Operations
    # =========================================================================

    def stage(self, paths: Sequence[str | Path]) -> None:
        """Stage files."""
        index = self._access.index
        status = self._access.status()
        for path in paths:
            p = self._access.normalize_path(path)
            flags = status.get(p, 0)
            if flags & (
                STATUS_WT_NEW | STATUS_WT_MODIFIED | STATUS_WT_TYPECHANGE | STATUS_WT_RENAMED
            ):
                index.add(p)
            elif flags & STATUS_WT_DELETED:
                index.remove(p)
        index.write()

    def stage_all(self) -> None:
        """Stage every change in the working tree, deletions included."""
        index = self._access.index
        index.add_all()
        index.update_all()
        index.write()

    def commit(self, message: str) -> str:
        """Create commit from staged changes. Returns commit sha.

        Commits are written by libgit2, so no git hooks run.
        """
        check_nothing_to_commit(self._access)
        return self._flows.commit_from_index(message)

    def restore(self, paths: Sequence[str | Path]) -> None:
        """Return files to their index content. Files git has never seen are deleted."""
        normalized = [self._access.normalize_path(p) for p in paths]
        index = self._access.index
        known = [p for p in normalized if p in index]
        if known:
            self._access.checkout_index_paths(known)
        for p in normalized:
            if p not in index:
                (self.path / p).unlink(missing_ok=True)

    # =========================================================================
    # Remote Operations
    # =========================================================================

    def remote_url(self, remote: str = "origin") -> str:
        return self._access.get_remote(remote).url or ""

    def fetch(self, remote: str = "origin") -> None:
        """Fetch from remote."""
        cbs = self._remote_callbacks()
        self._access.run_remote_operation(
            remote, "fetch", partial(pygit2.Remote.fetch, callbacks=cbs)
        )

    def push(self, remote: str = "origin") -> PushResult:
        """Push the current branch to the same branch on ``remote``."""
        branch = require_current_branch(self._access, "push")
        refspec = f"refs/heads/{branch}:refs/heads/{branch}"
        cbs = self._remote_callbacks()
        self._access.run_remote_operation(
            remote, "push", partial(pygit2.Remote.push, specs=[refspec], callbacks=cbs)
        )
        if cbs.rejected:
            refname, reason = next(iter(cbs.rejected.items()))
            raise PushRejectedError(remote, refname, reason)
        return PushResult(remote=remote, url=self.remote_url(remote), branch=branch)

    def fast_forward(self, remote: str = "origin") -> bool:
        """Move the current branch to its fetched remote counterpart.

        Returns True if HEAD moved. Requires a clean working tree. When local
        history is shallow and cannot be related to the remote, the clone is
        reset to the remote tip.
        """
        branch = require_current_branch(self._access, "update")
        remote_target = self._access.get_reference_target(f"refs/remotes/{remote}/{branch}")
        head = self._access.must_head_target()
        if remote_target == head:
            return False
        require_clean_worktree(self._access, "update")
        try:
            if self._access.descendant_of(remote_target, head):
                self._flows.fast_forward(remote_target)
                return True
            if self._access.descendant_of(head, remote_target):
                return False
        except pygit2.GitError:
            if not self._access.is_shallow:
                raise
        if self._access.is_shallow:
            self._flows.fast_forward(remote_target)
            return True
        raise DivergedBranchError(branch)
