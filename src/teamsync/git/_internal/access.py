"""Repository access layer - owns pygit2.Repository and exposes computed facts."""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pygit2

from teamsync.git._internal.constants import (
    CHECKOUT_FORCE,
    DIFF_WORKDIR_FLAGS,
    RESET_HARD,
    STATUS_IGNORED,
)
from teamsync.git.errors import (
    AuthenticationError,
    GitError,
    NotARepositoryError,
    RefNotFoundError,
    RemoteError,
)


class RepoAccess:
    """Owns pygit2.Repository and provides normalized access to repo state."""

    def __init__(self, repo_path: Path | str) -> None:
        self._path = Path(repo_path)
        try:
            self._repo = pygit2.Repository(str(self._path))
        except pygit2.GitError as e:
            raise NotARepositoryError(str(self._path)) from e

    @property
    def repo(self) -> pygit2.Repository:
        return self._repo

    @property
    def path(self) -> Path:
        return Path(self._repo.workdir) if self._repo.workdir else self._path

    @property
    def index(self) -> pygit2.Index:
        return self._repo.index  # type: ignore[no-any-return]

    # =========================================================================
    # Repository State Facts
    # =========================================================================

    @property
    def is_unborn(self) -> bool:
        return self._repo.head_is_unborn

    @property
    def is_detached(self) -> bool:
        return self._repo.head_is_detached

    @property
    def is_shallow(self) -> bool:
        return bool(self._repo.is_shallow)

    @property
    def head_target(self) -> pygit2.Oid:
        """Return HEAD target as Oid, resolving symbolic refs."""
        target = self._repo.head.target
        if isinstance(target, str):
            return self._repo.references[target].target  # type: ignore[return-value]
        return target

    def head_tree(self) -> pygit2.Tree | None:
        if self.is_unborn:
            return None
        return self._repo.head.peel(pygit2.Tree)

    @property
    def default_signature(self) -> pygit2.Signature:
        return self._repo.default_signature

    def current_branch_name(self) -> str | None:
        if self.is_unborn:
            try:
                ref = self._repo.references["HEAD"]
                target = getattr(ref, "target", None)
                if isinstance(target, str) and target.startswith("refs/heads/"):
                    return target[len("refs/heads/") :]
            except KeyError:
                # HEAD reference missing in unborn repo; no branch name available
                pass
            return None
        if self.is_detached:
            return None
        return self._repo.head.shorthand

    # =========================================================================
    # Must Helpers (assert replacements with proper errors)
    # =========================================================================

    def must_head_target(self) -> pygit2.Oid:
        """Return HEAD target Oid, raising if unborn."""
        if self.is_unborn:
            raise GitError("HEAD has no target (unborn branch)")
        return self.head_target

    def must_head_tree(self) -> pygit2.Tree:
        tree = self.head_tree()
        if tree is None:
            raise GitError("HEAD has no tree (unborn branch)")
        return tree

    # =========================================================================
    # Normalization Helpers
    # =========================================================================

    def normalize_path(self, path: str | Path) -> str:
        p = Path(path)
        if p.is_absolute():
            with contextlib.suppress(ValueError):
                p = p.relative_to(self.path)
        return p.as_posix()

    # =========================================================================
    # References
    # =========================================================================

    def get_reference_target(self, name: str) -> pygit2.Oid:
        try:
            target = self._repo.references[name].target
        except KeyError as e:
            raise RefNotFoundError(name) from e
        if isinstance(target, str):
            return self._repo.references[target].target  # type: ignore[return-value]
        return target

    def descendant_of(self, commit: pygit2.Oid, ancestor: pygit2.Oid) -> bool:
        return self._repo.descendant_of(commit, ancestor)

    # =========================================================================
    # Low-level pygit2 Operations (all pygit2 quirks live here)
    # =========================================================================

    def status(self) -> dict[str, int]:
        return {
            path: flags
            for path, flags in self._repo.status().items()
            if not flags & STATUS_IGNORED
        }

    def diff_head_to_workdir(self) -> pygit2.Diff:
        """Diff HEAD's tree against the working directory, new files included."""
        return self._repo.diff(self.must_head_target(), flags=DIFF_WORKDIR_FLAGS)

    def checkout_index_paths(self, paths: Iterable[str]) -> None:
        """Overwrite working tree files with their index content."""
        self._repo.checkout_index(strategy=CHECKOUT_FORCE, paths=list(paths))

    def reset_hard(self, oid: pygit2.Oid) -> None:
        self._repo.reset(oid, RESET_HARD)  # type: ignore[arg-type]

    def create_commit(
        self,
        ref: str | None,
        author: pygit2.Signature,
        committer: pygit2.Signature,
        message: str,
        tree_id: pygit2.Oid,
        parents: list[pygit2.Oid],
    ) -> pygit2.Oid:
        return self._repo.create_commit(ref, author, committer, message, tree_id, parents)

    # =========================================================================
    # Remote Operations (centralized error handling)
    # =========================================================================

    def get_remote(self, name: str) -> pygit2.Remote:
        if name not in [r.name for r in self._repo.remotes]:
            raise RemoteError(name, "Remote not found")
        return self._repo.remotes[name]

    def run_remote_operation(
        self,
        remote_name: str,
        op_name: str,
        operation: Callable[[pygit2.Remote], Any],
    ) -> Any:
        """
        Run a remote operation with centralized error mapping.

        Args:
            remote_name: Name of the remote (e.g., "origin")
            op_name: Human-readable operation name for error messages (e.g., "fetch")
            operation: Callable that takes a pygit2.Remote and performs the operation.

        Error mapping:
            - Authentication/credential errors → AuthenticationError(remote_name, op_name)
            - Other pygit2.GitError → RemoteError(remote_name, "{op_name} failed: {msg}")
        """
        remote = self.get_remote(remote_name)
        try:
            return operation(remote)
        except pygit2.GitError as e:
            msg = str(e).lower()
            if "authentication" in msg or "credential" in msg:
                raise AuthenticationError(remote_name, op_name) from e
            raise RemoteError(remote_name, f"{op_name} failed: {e}") from e
