"""Credential handling for git remote operations."""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import pygit2

from teamsync.core.logging import get_logger

if TYPE_CHECKING:
    from pygit2.enums import CredentialType

log = get_logger("git.credentials")

_MAX_CREDENTIAL_ATTEMPTS = 3


class SystemCredentialCallback(pygit2.RemoteCallbacks):
    """
    RemoteCallbacks that uses system credential helpers.

    Supports:
    - SSH via KeypairFromAgent (uses system SSH agent)
    - HTTPS via an explicit GitHub token, else git's configured credential helper

    Rejected reference updates reported by the remote during push are
    collected in ``rejected`` instead of being dropped.
    """

    def __init__(self, token: str | None = None) -> None:
        super().__init__()
        self._token = token
        self._attempts = 0
        self.rejected: dict[str, str] = {}

    def credentials(  # type: ignore[override]
        self,
        url: str,
        username_from_url: str | None,
        allowed_types: CredentialType,
    ) -> pygit2.Username | pygit2.UserPass | pygit2.Keypair | None:
        """Provide credentials for remote operations."""
        # libgit2 keeps asking while the server refuses
        self._attempts += 1
        if self._attempts > _MAX_CREDENTIAL_ATTEMPTS:
            return None

        # SSH: use agent
        if allowed_types & pygit2.enums.CredentialType.SSH_KEY:
            username = username_from_url or "git"
            return pygit2.KeypairFromAgent(username)

        # HTTPS: token first, then system credential helper
        if allowed_types & pygit2.enums.CredentialType.USERPASS_PLAINTEXT:
            if self._token:
                return pygit2.UserPass("x-access-token", self._token)
            creds = self._query_credential_helper(url)
            if creds:
                return pygit2.UserPass(creds["username"], creds["password"])

        return None

    def push_update_reference(self, refname: str, message: str | None) -> None:  # type: ignore[override]
        if message:
            log.warning("push_rejected", refname=refname, reason=message)
            self.rejected[refname] = message

    def _query_credential_helper(self, url: str) -> dict[str, str] | None:
        """
        Query system git credential helper.

        Invokes: git credential fill
        See: https://git-scm.com/docs/git-credential
        """
        parsed = urlparse(url)
        host = parsed.hostname or parsed.netloc
        input_lines = [
            f"protocol={parsed.scheme}",
            f"host={host}",
        ]
        if parsed.port is not None:
            input_lines.append(f"port={parsed.port}")
        if parsed.path:
            input_lines.append(f"path={parsed.path.lstrip('/')}")
        input_lines.append("")  # Empty line terminates input
        input_data = "\n".join(input_lines)

        try:
            result = subprocess.run(
                ["git", "credential", "fill"],
                input=input_data,
                capture_output=True,
                text=True,
                timeout=30,
                check=False,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            log.debug("credential_helper_unavailable", host=host, error=str(e))
            return None
        if result.returncode != 0:
            return None

        creds: dict[str, str] = {}
        for line in result.stdout.strip().split("\n"):
            if "=" in line:
                key, value = line.split("=", 1)
                creds[key] = value

        if "username" in creds and "password" in creds:
            return creds
        return None


def get_default_callbacks(token: str | None = None) -> SystemCredentialCallback:
    """Get default remote callbacks with system credential support."""
    return SystemCredentialCallback(token)
