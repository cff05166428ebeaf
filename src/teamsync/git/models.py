"""Serializable data models for git operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import pygit2

CloneOutcome = Literal["cloned", "updated", "failed"]


@dataclass(frozen=True, slots=True)
class DiffFileStat:
    """Line counts for one file in a diff."""

    file: str
    insertions: int
    deletions: int
    binary: bool


@dataclass(frozen=True, slots=True)
class DiffSummary:
    """Per-file and total line counts of a working tree diff."""

    files: tuple[DiffFileStat, ...]
    insertions: int
    deletions: int
    changed: int

    @classmethod
    def from_pygit2(cls, diff: pygit2.Diff) -> DiffSummary:
        files: list[DiffFileStat] = []
        for patch in diff:
            if patch is None:
                continue
            _, insertions, deletions = patch.line_stats
            files.append(
                DiffFileStat(
                    file=patch.delta.new_file.path,
                    insertions=insertions,
                    deletions=deletions,
                    binary=patch.delta.is_binary,
                )
            )
        return cls(
            files=tuple(files),
            insertions=sum(f.insertions for f in files),
            deletions=sum(f.deletions for f in files),
            changed=len(files),
        )

    @property
    def is_empty(self) -> bool:
        return self.changed == 0


@dataclass(frozen=True, slots=True)
class PushResult:
    """Where a push went."""

    remote: str
    url: str
    branch: str
