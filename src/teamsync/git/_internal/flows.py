"""Reusable transactional patterns for write operations."""

from __future__ import annotations

import pygit2

from teamsync.git._internal.access import RepoAccess


class WriteFlows:
    """Reusable transactional patterns for git write operations."""

    def __init__(self, access: RepoAccess) -> None:
        self._access = access

    def write_tree_and_commit(
        self,
        message: str,
        parents: list[pygit2.Oid],
    ) -> str:
        """
        Write index tree and create commit. Returns sha.

        Contract: Uses passed parents verbatim - does NOT re-read HEAD.
        Caller is responsible for capturing HEAD oid before any mutations.
        """
        self._access.index.write()
        tree_id = self._access.index.write_tree()
        sig = self._access.default_signature
        oid = self._access.create_commit(
            "HEAD",
            sig,
            sig,
            message,
            tree_id,
            parents,
        )
        return str(oid)

    def commit_from_index(self, message: str) -> str:
        """Create commit from current index state. Returns sha."""
        parents = [] if self._access.is_unborn else [self._access.head_target]
        return self.write_tree_and_commit(message, parents)

    def fast_forward(self, target: pygit2.Oid) -> None:
        """Move the current branch and working tree to ``target``."""
        self._access.reset_hard(target)
