"""Rewrite file content from approved spans."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from teamsync.core.formatting import pluralize
from teamsync.core.logging import get_logger
from teamsync.core.progress import status
from teamsync.sync.matching import FileChange, MatchSpan

log = get_logger("sync.applier")


@dataclass(frozen=True, slots=True)
class ReplaceOptions:
    """What a sync-replace run searches for and what it writes instead.

    ``replacement=None`` deletes the span. ``exclude_start``/``exclude_end``
    keep the span's first/last line and substitute only what is between
    them. ``inline`` substitutes the start pattern inside a single line
    rather than the whole line.
    """

    start_pattern: str
    end_pattern: str | None = None
    replacement: str | None = None
    exclude_start: bool = False
    exclude_end: bool = False
    inline: bool = False

    def inline_applies(self, span: MatchSpan) -> bool:
        return self.inline and span.is_single_line and not span.is_expanded


def get_indentation(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def apply_indentation(text: str, indent: str) -> str:
    """Strip the common indentation of ``text`` and prefix every line with ``indent``."""
    lines = text.split("\n")
    widths = [len(get_indentation(line)) for line in lines if line.strip()]
    common = min(widths, default=0)
    return "\n".join(indent + line[common:] for line in lines)


def _replace_span(lines: list[str], span: MatchSpan, options: ReplaceOptions) -> list[str]:
    orig_start, orig_end = span.original_start_line, span.original_end_line

    if options.inline_applies(span):
        return [lines[orig_start - 1].replace(options.start_pattern, options.replacement or "")]

    out: list[str] = []
    first = orig_start + 1 if options.exclude_start else orig_start
    last = orig_end - 1 if options.exclude_end else orig_end
    if options.exclude_start:
        out.append(lines[orig_start - 1])
    if options.replacement is not None and first <= last:
        indent_source = lines[min(first, len(lines)) - 1]
        out.append(apply_indentation(options.replacement, get_indentation(indent_source)))
    if options.exclude_end and orig_end > orig_start:
        out.append(lines[orig_end - 1])
    return out


def apply_replacements(content: str, spans: Sequence[MatchSpan], options: ReplaceOptions) -> str:
    """Apply every span in one pass over the lines of ``content``.

    A span consumes its (possibly expanded) line range. Lines between
    spans are copied untouched.
    """
    lines = content.split("\n")
    ordered = sorted(spans, key=lambda s: s.start_line)
    result: list[str] = []
    i = 0
    k = 0
    while i < len(lines):
        if k < len(ordered) and i + 1 == ordered[k].start_line:
            span = ordered[k]
            result.extend(_replace_span(lines, span, options))
            i = span.end_line
            k += 1
        else:
            result.append(lines[i])
            i += 1
    return "\n".join(result)


def apply_approved_changes(
    repo_dir: Path,
    changes: Sequence[FileChange],
    approved: Mapping[str, Sequence[MatchSpan]],
    options: ReplaceOptions,
) -> list[str]:
    """Write each file with approved spans once. Returns the written paths."""
    written: list[str] = []
    for change in changes:
        spans = approved.get(change.file)
        if not spans:
            continue
        new_content = apply_replacements(change.original_content, spans, options)
        (repo_dir / change.file).write_bytes(new_content.encode("utf-8"))
        log.info("file_written", repo=repo_dir.name, file=change.file, spans=len(spans))
        status(f"[dim]Written: {change.file} ({pluralize(len(spans), 'change')})[/dim]", indent=2)
        written.append(change.file)
    return written
