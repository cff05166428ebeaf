"""Internal components for git operations - not part of public API."""

from teamsync.git._internal.access import RepoAccess
from teamsync.git._internal.flows import WriteFlows
from teamsync.git._internal.preconditions import (
    check_nothing_to_commit,
    require_clean_worktree,
    require_current_branch,
)

__all__ = [
    "RepoAccess",
    "WriteFlows",
    "check_nothing_to_commit",
    "require_clean_worktree",
    "require_current_branch",
]
