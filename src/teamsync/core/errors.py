"""teamsync error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: GitHub
- 4xxx: Sync
- 5xxx: External tools (docker, kubectl, shell)
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003

    # GitHub (3xxx)
    GITHUB_AUTH_MISSING = 3001
    GITHUB_REQUEST_FAILED = 3002
    GITHUB_QUERY_ERROR = 3003
    GITHUB_INVALID_RESPONSE = 3004

    # Sync (4xxx)
    SYNC_MISSING_ARGUMENT = 4001
    SYNC_INVALID_ARGUMENT = 4002
    SYNC_STATE_CORRUPT = 4003

    # External tools (5xxx)
    EXTERNAL_TOOL_FAILED = 5001
    EXTERNAL_TOOL_INVALID_OUTPUT = 5002


@dataclass(frozen=True, slots=True)
class TeamSyncError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output and structured logs."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(TeamSyncError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str, hint: str | None = None) -> "ConfigError":
        message = f"Missing required config field: {field}"
        if hint:
            message = f"{message} ({hint})"
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=message,
            details={"field": field},
        )


class GitHubError(TeamSyncError):
    """GitHub API errors."""

    @classmethod
    def auth_missing(cls) -> "GitHubError":
        return cls(
            code=ErrorCode.GITHUB_AUTH_MISSING,
            message="No GitHub token found. Set GITHUB_TOKEN or run 'gh auth login'",
        )

    @classmethod
    def request_failed(cls, reason: str, status_code: int | None = None) -> "GitHubError":
        return cls(
            code=ErrorCode.GITHUB_REQUEST_FAILED,
            message=f"GitHub request failed: {reason}",
            retryable=status_code is None or status_code >= 500,
            details={"status_code": status_code, "reason": reason},
        )

    @classmethod
    def query_error(cls, messages: list[str]) -> "GitHubError":
        return cls(
            code=ErrorCode.GITHUB_QUERY_ERROR,
            message=f"GitHub GraphQL query failed: {'; '.join(messages)}",
            details={"errors": messages},
        )

    @classmethod
    def invalid_response(cls, reason: str) -> "GitHubError":
        return cls(
            code=ErrorCode.GITHUB_INVALID_RESPONSE,
            message=f"Unexpected GitHub response shape: {reason}",
            details={"reason": reason},
        )


class SyncError(TeamSyncError):
    """Errors raised by sync-replace, sync-cmd and related fleet operations."""

    @classmethod
    def missing_argument(cls, name: str, flag: str) -> "SyncError":
        return cls(
            code=ErrorCode.SYNC_MISSING_ARGUMENT,
            message=f"Missing {name}, use {flag}=...",
            details={"argument": name},
        )

    @classmethod
    def invalid_argument(cls, name: str, value: Any, reason: str) -> "SyncError":
        return cls(
            code=ErrorCode.SYNC_INVALID_ARGUMENT,
            message=f"Invalid {name} {value!r}: {reason}",
            details={"argument": name, "value": str(value), "reason": reason},
        )

    @classmethod
    def state_corrupt(cls, path: str, reason: str) -> "SyncError":
        return cls(
            code=ErrorCode.SYNC_STATE_CORRUPT,
            message=f"Session state at {path} is unreadable: {reason}. "
            "Fix or remove the file, or run 'tsm sync-replace reset'",
            details={"path": path, "reason": reason},
        )


class ExternalToolError(TeamSyncError):
    """Failures of external command-line tools (docker, kubectl, gh)."""

    @classmethod
    def failed(cls, tool: str, exit_code: int, stderr: str) -> "ExternalToolError":
        return cls(
            code=ErrorCode.EXTERNAL_TOOL_FAILED,
            message=f"{tool} exited with code {exit_code}: {stderr.strip() or 'no output'}",
            details={"tool": tool, "exit_code": exit_code},
        )

    @classmethod
    def invalid_output(cls, tool: str, reason: str) -> "ExternalToolError":
        return cls(
            code=ErrorCode.EXTERNAL_TOOL_INVALID_OUTPUT,
            message=f"Unexpected output from {tool}: {reason}",
            details={"tool": tool, "reason": reason},
        )
