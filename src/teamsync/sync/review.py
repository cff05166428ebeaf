"""Interactive per-match review: expand, undo, accept or skip.

``MatchReview`` is the pure state machine. ``review_match`` drives it from
a ``KeySource`` and draws through a ``Terminal``, so both halves can be
exercised without a real tty.

Expansion choices carry over between matches of one run: accepting a match
whose bounds were widened records the trimmed text of each extra line
(``ExtraLinePattern``). Later matches whose neighbouring lines read the
same are widened the same way before they are shown.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from rich.text import Text

from teamsync.core.logging import get_logger
from teamsync.sync.applier import ReplaceOptions
from teamsync.sync.display import DEFAULT_CONTEXT_LINES, build_match_display
from teamsync.sync.matching import MatchSpan
from teamsync.sync.terminal import KeySource, Terminal

log = get_logger("sync.review")

Action = Literal["apply", "skip"]

HINT = "  ↑↓ select lines  enter accept  s skip  z undo"


@dataclass(frozen=True, slots=True)
class ExtraLinePattern:
    """A line next to a match that the operator chose to include."""

    trimmed_content: str
    position: Literal["above", "below"]
    offset: int


@dataclass(frozen=True, slots=True)
class ReviewOutcome:
    action: Action
    start_line: int
    end_line: int
    extra_lines: tuple[ExtraLinePattern, ...]

    def approved(self, span: MatchSpan) -> MatchSpan:
        return span.expanded(self.start_line, self.end_line)


def auto_expand(
    lines: Sequence[str],
    span: MatchSpan,
    extra_lines: Iterable[ExtraLinePattern],
) -> tuple[int, int, int]:
    """Widen ``span`` wherever its neighbours match remembered patterns.

    Returns ``(start_line, end_line, lines_added)``. Each direction stops at
    the first pattern whose line does not match.
    """
    start, end = span.start_line, span.end_line
    ordered = sorted(extra_lines, key=lambda p: p.offset)

    for pattern in (p for p in ordered if p.position == "above"):
        idx = span.start_line - 1 - pattern.offset
        if idx < 0 or lines[idx].strip() != pattern.trimmed_content:
            break
        start = min(start, idx + 1)

    for pattern in (p for p in ordered if p.position == "below"):
        idx = span.end_line - 1 + pattern.offset
        if idx >= len(lines) or lines[idx].strip() != pattern.trimmed_content:
            break
        end = max(end, idx + 1)

    return start, end, (span.start_line - start) + (end - span.end_line)


def compute_extra_lines(
    lines: Sequence[str],
    span: MatchSpan,
    start_line: int,
    end_line: int,
) -> tuple[ExtraLinePattern, ...]:
    """Patterns describing how ``start_line..end_line`` widens ``span``."""
    above = (
        ExtraLinePattern(lines[i - 1].strip(), "above", span.start_line - i)
        for i in range(start_line, span.start_line)
    )
    below = (
        ExtraLinePattern(lines[i - 1].strip(), "below", i - span.end_line)
        for i in range(span.end_line + 1, end_line + 1)
    )
    return (*above, *below)


class MatchReview:
    """Current bounds of one match under review, with an undo stack."""

    def __init__(
        self,
        lines: Sequence[str],
        span: MatchSpan,
        extra_lines: Iterable[ExtraLinePattern] = (),
    ) -> None:
        self.lines = lines
        self.span = span
        self._carried = tuple(extra_lines)
        self.start_line, self.end_line, self.auto_applied = auto_expand(lines, span, self._carried)
        self._undo: list[tuple[int, int]] = []

    def expand_up(self) -> bool:
        if self.start_line <= 1:
            return False
        self._undo.append((self.start_line, self.end_line))
        self.start_line -= 1
        return True

    def expand_down(self) -> bool:
        if self.end_line >= len(self.lines):
            return False
        self._undo.append((self.start_line, self.end_line))
        self.end_line += 1
        return True

    def undo(self) -> bool:
        """Revert the last change; with nothing to pop, reset to the span as found."""
        if self._undo:
            self.start_line, self.end_line = self._undo.pop()
            return True
        original = (self.span.start_line, self.span.end_line)
        if (self.start_line, self.end_line) == original:
            return False
        self.start_line, self.end_line = original
        return True

    def auto_expand_message(self) -> str | None:
        above = self.span.start_line - self.start_line
        below = self.end_line - self.span.end_line
        if not self.auto_applied:
            return None
        parts = [f"+{n} {where}" for n, where in ((above, "above"), (below, "below")) if n > 0]
        return f"  Auto-included {', '.join(parts)} (matching previous selection)"

    def outcome(self, action: Action) -> ReviewOutcome:
        """Skipping keeps the carried patterns; applying replaces them."""
        if action == "apply":
            extra = compute_extra_lines(self.lines, self.span, self.start_line, self.end_line)
        else:
            extra = self._carried
        return ReviewOutcome(action, self.start_line, self.end_line, extra)


async def review_match(
    lines: Sequence[str],
    span: MatchSpan,
    options: ReplaceOptions,
    *,
    terminal: Terminal,
    keys: KeySource | None,
    extra_lines: Iterable[ExtraLinePattern] = (),
    force: bool = False,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> ReviewOutcome:
    """Show one match and let the operator settle its bounds.

    With ``force`` the auto-expanded match is drawn once and applied
    without reading any key.

    Raises:
        KeyboardInterrupt: ctrl-c was pressed.
    """
    review = MatchReview(lines, span, extra_lines)

    def frame(*, hint: bool = True) -> list[Text]:
        rows = build_match_display(
            lines, span, review.start_line, review.end_line, options, context_lines
        )
        if hint:
            rows.append(Text(HINT, style="dim"))
        return rows

    if message := review.auto_expand_message():
        terminal.render([Text(message, style="cyan"), Text("")])

    if force or keys is None:
        terminal.render(frame(hint=False))
        return review.outcome("apply")

    terminal.render(frame())
    while True:
        key = await keys.read()
        if key == "ctrl-c":
            raise KeyboardInterrupt
        if key in ("enter", "s"):
            terminal.clear()
            terminal.render(frame(hint=False))
            action: Action = "apply" if key == "enter" else "skip"
            log.debug(
                "match_reviewed",
                file=span.file,
                line=span.start_line,
                action=action,
                start=review.start_line,
                end=review.end_line,
            )
            return review.outcome(action)
        step = {"up": review.expand_up, "down": review.expand_down, "z": review.undo}.get(key)
        if step is not None and step():
            terminal.clear()
            terminal.render(frame())
