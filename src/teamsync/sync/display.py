"""Rich rendering of match previews and diffs."""

from __future__ import annotations

from collections.abc import Sequence

from rich.text import Text

from teamsync.sync.applier import ReplaceOptions, apply_indentation, get_indentation
from teamsync.sync.matching import MatchSpan

DEFAULT_CONTEXT_LINES = 10

_PREVIEW_PREFIX = "     + │ "


def _row(number: int, marker: str, text: str, style: str) -> Text:
    return Text(f"{number:>4} {marker} │ {text}", style=style)


def build_match_display(
    lines: Sequence[str],
    span: MatchSpan,
    start_line: int,
    end_line: int,
    options: ReplaceOptions,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> list[Text]:
    """Numbered source rows around the span, then a preview of what replaces it.

    ``span`` carries the bounds as found; ``start_line``/``end_line`` are
    the current, possibly expanded, bounds.

    Row styles:
        red ``-``      line of the original span, replaced
        magenta ``-``  line added by expansion, replaced
        yellow ``~``   boundary line kept by exclude start/end
        dim            context
    """
    first = max(1, start_line - context_lines)
    last = min(len(lines), end_line + context_lines)
    orig_start, orig_end = span.original_start_line, span.original_end_line
    replaced_start = orig_start + 1 if options.exclude_start else orig_start
    replaced_end = orig_end - 1 if options.exclude_end else orig_end

    rows: list[Text] = []
    for n in range(first, last + 1):
        text = lines[n - 1]
        excluded = (options.exclude_start and n == orig_start) or (
            options.exclude_end and n == orig_end
        )
        if excluded:
            rows.append(_row(n, "~", text, "yellow"))
        elif replaced_start <= n <= replaced_end:
            rows.append(_row(n, "-", text, "red"))
        elif start_line <= n < orig_start or orig_end < n <= end_line:
            rows.append(_row(n, "-", text, "magenta"))
        else:
            rows.append(_row(n, " ", text, "dim"))

    rows.append(Text(""))
    unexpanded = (start_line, end_line) == (orig_start, orig_end)
    if options.inline and orig_start == orig_end and unexpanded:
        new_line = lines[orig_start - 1].replace(options.start_pattern, options.replacement or "")
        rows.append(Text(f"{_PREVIEW_PREFIX}{new_line}", style="green"))
    elif options.replacement is not None:
        indent_source = lines[min(replaced_start, len(lines)) - 1]
        indented = apply_indentation(options.replacement, get_indentation(indent_source))
        rows.extend(Text(f"{_PREVIEW_PREFIX}{line}", style="green") for line in indented.split("\n"))
    else:
        rows.append(Text("     (lines will be deleted)", style="dim"))
    return rows


def colorize_diff(diff: str, indent: str = "") -> Text:
    """Unified diff text with added/removed/hunk lines colored."""
    out = Text()
    for i, line in enumerate(diff.rstrip("\n").split("\n")):
        if i:
            out.append("\n")
        if line.startswith("+") and not line.startswith("+++"):
            style = "green"
        elif line.startswith("-") and not line.startswith("---"):
            style = "red"
        elif line.startswith("@@"):
            style = "cyan"
        elif line.startswith("diff"):
            style = "magenta"
        elif line.startswith("index"):
            style = "yellow"
        else:
            style = "dim"
        out.append(f"{indent}{line}", style=style)
    return out
