"""Git operations module."""

from teamsync.git.credentials import SystemCredentialCallback, get_default_callbacks
from teamsync.git.errors import (
    AuthenticationError,
    DetachedHeadError,
    DirtyWorkingTreeError,
    DivergedBranchError,
    GitError,
    NotARepositoryError,
    NothingToCommitError,
    PushRejectedError,
    RefNotFoundError,
    RemoteError,
)
from teamsync.git.mirror import MirrorCache
from teamsync.git.models import CloneOutcome, DiffFileStat, DiffSummary, PushResult
from teamsync.git.ops import GitOps

__all__ = [
    # Main classes
    "GitOps",
    "MirrorCache",
    # Models
    "CloneOutcome",
    "DiffFileStat",
    "DiffSummary",
    "PushResult",
    # Credentials
    "SystemCredentialCallback",
    "get_default_callbacks",
    # Errors
    "GitError",
    "NotARepositoryError",
    "RefNotFoundError",
    "NothingToCommitError",
    "DirtyWorkingTreeError",
    "DetachedHeadError",
    "DivergedBranchError",
    "RemoteError",
    "PushRejectedError",
    "AuthenticationError",
]
