"""Find start/end pattern spans in repository clones.

Patterns are plain substrings, never regular expressions. A span opens on
a line containing the start pattern and closes on the first line (the same
line included, when the end pattern occurs after the start) containing the
end pattern. Scanning resumes after the closing line, so spans in one file
are ascending and never overlap.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from fnmatch import fnmatchcase
from pathlib import Path

from teamsync.core.excludes import is_pruned_dir
from teamsync.core.logging import get_logger

log = get_logger("sync.matching")

DEFAULT_FILE_PATTERN = "**/*"

_BRACES = re.compile(r"\{([^{}]*)\}")


@dataclass(frozen=True, slots=True)
class MatchSpan:
    """A 1-indexed inclusive line range in one file.

    ``original_start_line``/``original_end_line`` keep the bounds as found,
    before any interactive expansion.
    """

    file: str
    start_line: int
    end_line: int
    matched_text: str
    original_start_line: int = 0
    original_end_line: int = 0

    def __post_init__(self) -> None:
        if self.start_line > self.end_line:
            raise ValueError(f"start_line {self.start_line} > end_line {self.end_line}")
        if not self.original_start_line:
            object.__setattr__(self, "original_start_line", self.start_line)
        if not self.original_end_line:
            object.__setattr__(self, "original_end_line", self.end_line)

    @property
    def is_expanded(self) -> bool:
        return (self.start_line, self.end_line) != (
            self.original_start_line,
            self.original_end_line,
        )

    @property
    def is_single_line(self) -> bool:
        return self.original_start_line == self.original_end_line

    def expanded(self, start_line: int, end_line: int) -> MatchSpan:
        """Copy with new bounds; the original bounds are kept."""
        return replace(self, start_line=start_line, end_line=end_line)


@dataclass(slots=True)
class FileChange:
    """One file's content as read, plus every span found in it."""

    file: str
    original_content: str
    matches: list[MatchSpan] = field(default_factory=list)


def find_matches(
    content: str,
    start_pattern: str,
    end_pattern: str | None = None,
    *,
    file: str = "",
) -> list[MatchSpan]:
    """Scan ``content`` line by line for start/end spans."""
    lines = content.split("\n")
    matches: list[MatchSpan] = []

    i = 0
    while i < len(lines):
        line = lines[i]
        if start_pattern not in line:
            i += 1
            continue

        if end_pattern is None:
            matches.append(MatchSpan(file, i + 1, i + 1, line))
            i += 1
            continue

        if end_pattern in line and line.index(end_pattern) > line.index(start_pattern):
            matches.append(MatchSpan(file, i + 1, i + 1, line))
            i += 1
            continue

        j = i + 1
        while j < len(lines) and end_pattern not in lines[j]:
            j += 1
        if j == len(lines):
            # Unterminated; try again from the next line
            i += 1
            continue

        matches.append(MatchSpan(file, i + 1, j + 1, "\n".join(lines[i : j + 1])))
        i = j + 1

    return matches


# =============================================================================
# File selection
# =============================================================================


def _expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives: ``*.{kt,java}`` -> ``*.kt``, ``*.java``."""
    m = _BRACES.search(pattern)
    if m is None:
        return [pattern]
    head, tail = pattern[: m.start()], pattern[m.end() :]
    expanded: list[str] = []
    for option in m.group(1).split(","):
        expanded.extend(_expand_braces(f"{head}{option}{tail}"))
    return expanded


def _match_segments(parts: list[str], pats: list[str]) -> bool:
    if not pats:
        return not parts
    head, rest = pats[0], pats[1:]
    if head == "**":
        # Zero or more whole path segments
        return any(_match_segments(parts[k:], rest) for k in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatchcase(parts[0], head) and _match_segments(parts[1:], rest)


def glob_match(path: str, pattern: str) -> bool:
    """Match a relative POSIX path against a glob.

    ``**`` spans zero or more directories, ``*`` and ``?`` stay within one
    path segment, and ``{a,b}`` lists alternatives.
    """
    parts = path.split("/")
    return any(
        _match_segments(parts, [p for p in alt.split("/") if p])
        for alt in _expand_braces(pattern)
    )


def iter_repo_files(repo_dir: Path, file_pattern: str = DEFAULT_FILE_PATTERN) -> Iterator[str]:
    """Yield relative POSIX paths of files under ``repo_dir`` matching the glob.

    VCS metadata and dependency directories are never descended into.
    """
    for dirpath, dirnames, filenames in os.walk(repo_dir):
        dirnames[:] = sorted(d for d in dirnames if not is_pruned_dir(d))
        rel_dir = Path(dirpath).relative_to(repo_dir).as_posix()
        for name in sorted(filenames):
            rel = name if rel_dir == "." else f"{rel_dir}/{name}"
            if glob_match(rel, file_pattern):
                yield rel


def find_matches_in_repo(
    repo_dir: Path,
    start_pattern: str,
    end_pattern: str | None = None,
    file_pattern: str = DEFAULT_FILE_PATTERN,
) -> list[FileChange]:
    """Every file in the clone with at least one span."""
    changes: list[FileChange] = []
    for rel in iter_repo_files(repo_dir, file_pattern):
        path = repo_dir / rel
        try:
            content = path.read_bytes().decode("utf-8")
        except (UnicodeDecodeError, OSError) as e:
            log.debug("file_skipped", repo=repo_dir.name, file=rel, reason=type(e).__name__)
            continue
        matches = find_matches(content, start_pattern, end_pattern, file=rel)
        if matches:
            changes.append(FileChange(rel, content, matches))
    return changes
