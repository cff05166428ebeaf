"""Persisted session state and prompt input history.

Both files are plain JSON in the cache directory, read and rewritten
whole on every update. Concurrent tsm processes against the same cache
directory are not supported.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from teamsync.core.errors import SyncError
from teamsync.core.logging import get_logger

log = get_logger("sync.state")

DEFAULT_HISTORY_SIZE = 20


def _first_line(e: Exception) -> str:
    return (str(e).splitlines() or [type(e).__name__])[0]


# =============================================================================
# Session state
# =============================================================================


class SessionState(BaseModel):
    """Repo name -> tracked file paths (relative to the repo root)."""

    model_config = ConfigDict(populate_by_name=True)

    modified_files: dict[str, list[str]] = Field(default_factory=dict, alias="modifiedFiles")

    @property
    def is_empty(self) -> bool:
        return not any(self.modified_files.values())

    def tracked_repos(self) -> list[str]:
        return [repo for repo, files in self.modified_files.items() if files]

    def files_for(self, repo: str) -> list[str]:
        return list(self.modified_files.get(repo, []))

    def track(self, repo: str, files: Iterable[str]) -> None:
        """Add files to a repo's tracked set, keeping first-seen order."""
        current = self.modified_files.setdefault(repo, [])
        for f in files:
            if f not in current:
                current.append(f)

    def set_files(self, repo: str, files: Iterable[str]) -> None:
        self.modified_files[repo] = list(files)

    def drop(self, repo: str) -> None:
        self.modified_files.pop(repo, None)

    def pruned(self) -> SessionState:
        """Copy without repos whose file list is empty."""
        return SessionState(
            modified_files={repo: list(files) for repo, files in self.modified_files.items() if files}
        )


def load_state(path: Path) -> SessionState:
    """Read session state. A missing file is an empty session.

    Raises:
        SyncError: The file exists but is not valid session state.
    """
    if not path.exists():
        return SessionState()
    try:
        return SessionState.model_validate_json(path.read_text(encoding="utf-8"))
    except (ValidationError, OSError) as e:
        raise SyncError.state_corrupt(str(path), _first_line(e)) from e


def save_state(path: Path, state: SessionState) -> SessionState:
    """Write ``state`` pruned of empty repos. Returns what was written."""
    pruned = state.pruned()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(pruned.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    log.debug("state_saved", path=str(path), repos=len(pruned.modified_files))
    return pruned


class SessionStore:
    """Loads and saves the session state file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> SessionState:
        return load_state(self._path)

    def save(self, state: SessionState) -> SessionState:
        return save_state(self._path, state)

    def reset(self) -> SessionState:
        return save_state(self._path, SessionState())


# =============================================================================
# Input history
# =============================================================================


class InputHistory(BaseModel):
    """Recent prompt answers per field, newest first."""

    model_config = ConfigDict(populate_by_name=True)

    start_pattern: list[str] = Field(default_factory=list, alias="startPattern")
    end_pattern: list[str] = Field(default_factory=list, alias="endPattern")
    replacement: list[str] = Field(default_factory=list, alias="replacement")
    file_pattern: list[str] = Field(default_factory=list, alias="filePattern")


def add_to_history(entries: list[str], value: str, limit: int = DEFAULT_HISTORY_SIZE) -> list[str]:
    """Move ``value`` to the front, de-duplicated, keeping at most ``limit`` entries.

    Blank values leave the history unchanged.
    """
    if not value.strip() or (entries and entries[0] == value):
        return entries
    return [value, *(e for e in entries if e != value)][:limit]


class HistoryStore:
    """Loads and saves the input history file.

    History is a convenience: an unreadable file is logged and treated as
    empty rather than failing the command.
    """

    def __init__(self, path: Path, *, limit: int = DEFAULT_HISTORY_SIZE) -> None:
        self._path = path
        self._limit = limit

    def load(self) -> InputHistory:
        if not self._path.exists():
            return InputHistory()
        try:
            return InputHistory.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (ValidationError, OSError) as e:
            log.warning("history_unreadable", path=str(self._path), error=_first_line(e))
            return InputHistory()

    def save(self, history: InputHistory) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(history.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

    def record(self, field: str, value: str) -> InputHistory:
        """Push ``value`` onto one history field and save."""
        history = self.load()
        updated = add_to_history(getattr(history, field), value, self._limit)
        history = history.model_copy(update={field: updated})
        self.save(history)
        return history
