"""Precondition helpers for git write operations."""

from __future__ import annotations

from teamsync.git._internal.access import RepoAccess
from teamsync.git.errors import (
    DetachedHeadError,
    DirtyWorkingTreeError,
    NothingToCommitError,
)

# =============================================================================
# Branch Preconditions
# =============================================================================


def require_current_branch(access: RepoAccess, operation: str) -> str:
    """Raise if detached HEAD; return current branch name."""
    branch = access.current_branch_name()
    if not branch:
        raise DetachedHeadError(operation)
    return branch


# =============================================================================
# Working Tree Preconditions
# =============================================================================


def require_clean_worktree(access: RepoAccess, operation: str) -> None:
    """Raise if the working tree or index differs from HEAD."""
    if access.status():
        raise DirtyWorkingTreeError(operation)


def check_nothing_to_commit(access: RepoAccess) -> None:
    """Raise if the index matches HEAD."""
    if access.is_unborn:
        if len(access.index) == 0:
            raise NothingToCommitError
        return
    tree = access.must_head_tree()
    diff = access.index.diff_to_tree(tree)
    if diff.stats.files_changed == 0:
        raise NothingToCommitError
