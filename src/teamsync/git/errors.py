"""Git module error types."""


class GitError(Exception):
    """Base error for git operations."""

    pass


class NotARepositoryError(GitError):
    """Path is not a git repository."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not a git repository: {path}")
        self.path = path


class RefNotFoundError(GitError):
    """Reference (branch, tag, commit) not found."""

    def __init__(self, ref: str) -> None:
        super().__init__(f"Reference not found: {ref}")
        self.ref = ref


class NothingToCommitError(GitError):
    """No staged changes to commit."""

    def __init__(self) -> None:
        super().__init__("Nothing to commit: no staged changes")


class DirtyWorkingTreeError(GitError):
    """Working tree has uncommitted changes."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation}: working tree has uncommitted changes")
        self.operation = operation


class DetachedHeadError(GitError):
    """Operation requires a branch but HEAD is detached."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation}: HEAD is detached")
        self.operation = operation


class DivergedBranchError(GitError):
    """Local branch cannot be fast-forwarded to its remote counterpart."""

    def __init__(self, branch: str) -> None:
        super().__init__(f"Local {branch} has diverged from origin/{branch}; update it by hand")
        self.branch = branch


class RemoteError(GitError):
    """Error communicating with remote."""

    def __init__(self, remote: str, message: str) -> None:
        super().__init__(f"Remote error ({remote}): {message}")
        self.remote = remote


class PushRejectedError(RemoteError):
    """Remote refused one or more reference updates."""

    def __init__(self, remote: str, refname: str, reason: str) -> None:
        super().__init__(remote, f"push of {refname} rejected: {reason}")
        self.refname = refname
        self.reason = reason


class AuthenticationError(GitError):
    """Authentication failed for remote operation."""

    def __init__(self, remote: str, operation: str | None = None) -> None:
        op_part = f" during {operation}" if operation else ""
        super().__init__(f"Authentication failed for remote {remote!r}{op_part}")
        self.remote = remote
        self.operation = operation
