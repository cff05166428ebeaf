"""Tests for sync.review.

Covers:
- MatchReview expansion, bounds and undo
- auto_expand / compute_extra_lines pattern carry-over
- review_match driven by scripted keys against a recording terminal
- force mode, skip, ctrl-c
"""

from __future__ import annotations

import pytest

from teamsync.sync.applier import ReplaceOptions
from teamsync.sync.matching import MatchSpan
from teamsync.sync.review import (
    HINT,
    ExtraLinePattern,
    MatchReview,
    auto_expand,
    compute_extra_lines,
    review_match,
)

LINES = ["header", "  // comment", "  MATCH", "  trailer", "footer"]
SPAN = MatchSpan("f.kt", 3, 3, "  MATCH")
OPTIONS = ReplaceOptions("MATCH", replacement="NEW")


class TestMatchReview:
    """Tests for the MatchReview state machine."""

    def test_expand_up_and_down(self) -> None:
        """Each step widens by one line."""
        review = MatchReview(LINES, SPAN)
        assert review.expand_up()
        assert review.expand_down()
        assert (review.start_line, review.end_line) == (2, 4)

    def test_expand_stops_at_file_bounds(self) -> None:
        """Expansion past the first or last line is refused."""
        review = MatchReview(["only"], MatchSpan("f", 1, 1, "only"))
        assert not review.expand_up()
        assert not review.expand_down()
        assert (review.start_line, review.end_line) == (1, 1)

    def test_undo_reverts_last_step(self) -> None:
        """Undo pops one expansion."""
        review = MatchReview(LINES, SPAN)
        review.expand_up()
        review.expand_up()
        assert review.undo()
        assert review.start_line == 2

    def test_undo_with_empty_stack_resets_auto_expansion(self) -> None:
        """Undo with nothing to pop returns to the span as found."""
        carried = (ExtraLinePattern("// comment", "above", 1),)
        review = MatchReview(LINES, SPAN, carried)
        assert review.start_line == 2
        assert review.undo()
        assert (review.start_line, review.end_line) == (3, 3)
        assert not review.undo()

    def test_apply_records_extra_lines(self) -> None:
        """Applying an expanded match records the extra lines."""
        review = MatchReview(LINES, SPAN)
        review.expand_up()
        review.expand_down()
        outcome = review.outcome("apply")
        assert outcome.extra_lines == (
            ExtraLinePattern("// comment", "above", 1),
            ExtraLinePattern("trailer", "below", 1),
        )
        assert outcome.approved(SPAN).start_line == 2

    def test_skip_keeps_carried_patterns(self) -> None:
        """Skipping passes the previous patterns on unchanged."""
        carried = (ExtraLinePattern("nothing like this", "below", 1),)
        review = MatchReview(LINES, SPAN, carried)
        review.expand_up()
        assert review.outcome("skip").extra_lines == carried


class TestAutoExpand:
    """Tests for auto_expand and compute_extra_lines."""

    def test_matching_neighbours_included(self) -> None:
        """Neighbours with the same trimmed text are pulled in."""
        patterns = (
            ExtraLinePattern("// comment", "above", 1),
            ExtraLinePattern("trailer", "below", 1),
        )
        assert auto_expand(LINES, SPAN, patterns) == (2, 4, 2)

    def test_indentation_ignored(self) -> None:
        """Comparison uses trimmed content."""
        lines = ["        // comment", "MATCH"]
        patterns = (ExtraLinePattern("// comment", "above", 1),)
        assert auto_expand(lines, MatchSpan("f", 2, 2, "MATCH"), patterns)[:2] == (1, 2)

    def test_stops_at_first_mismatch(self) -> None:
        """A mismatch at offset 1 blocks offset 2."""
        patterns = (
            ExtraLinePattern("different", "above", 1),
            ExtraLinePattern("header", "above", 2),
        )
        assert auto_expand(LINES, SPAN, patterns) == (3, 3, 0)

    def test_out_of_range_ignored(self) -> None:
        """Patterns pointing outside the file do nothing."""
        patterns = (ExtraLinePattern("x", "below", 10),)
        assert auto_expand(LINES, SPAN, patterns) == (3, 3, 0)

    def test_compute_extra_lines_round_trip(self) -> None:
        """Patterns computed from a selection re-create it."""
        extra = compute_extra_lines(LINES, SPAN, 1, 5)
        assert auto_expand(LINES, SPAN, extra) == (1, 5, 4)


class TestReviewMatch:
    """Tests for the review_match driver."""

    @pytest.mark.asyncio
    async def test_enter_applies(self, terminal, scripted_keys) -> None:
        """Enter accepts the match at its current bounds."""
        keys = scripted_keys(["enter"])
        outcome = await review_match(LINES, SPAN, OPTIONS, terminal=terminal, keys=keys)
        assert outcome.action == "apply"
        assert (outcome.start_line, outcome.end_line) == (3, 3)
        assert HINT in terminal.frames[0]
        assert HINT not in terminal.frames[-1]
        assert terminal.clears == 1

    @pytest.mark.asyncio
    async def test_skip(self, terminal, scripted_keys) -> None:
        """s skips the match."""
        outcome = await review_match(LINES, SPAN, OPTIONS, terminal=terminal, keys=scripted_keys(["s"]))
        assert outcome.action == "skip"

    @pytest.mark.asyncio
    async def test_expand_then_apply(self, terminal, scripted_keys) -> None:
        """Arrow keys widen the span and each change redraws."""
        keys = scripted_keys(["up", "down", "enter"])
        outcome = await review_match(LINES, SPAN, OPTIONS, terminal=terminal, keys=keys)
        assert (outcome.start_line, outcome.end_line) == (2, 4)
        assert len(terminal.frames) == 4
        assert terminal.clears == 3

    @pytest.mark.asyncio
    async def test_refused_step_does_not_redraw(self, terminal, scripted_keys) -> None:
        """A key that changes nothing leaves the frame alone."""
        lines = ["MATCH", "next"]
        keys = scripted_keys(["up", "x", "enter"])
        await review_match(lines, MatchSpan("f", 1, 1, "MATCH"), OPTIONS, terminal=terminal, keys=keys)
        assert len(terminal.frames) == 2

    @pytest.mark.asyncio
    async def test_undo_key(self, terminal, scripted_keys) -> None:
        """z reverts the last expansion."""
        keys = scripted_keys(["up", "up", "z", "enter"])
        outcome = await review_match(LINES, SPAN, OPTIONS, terminal=terminal, keys=keys)
        assert outcome.start_line == 2

    @pytest.mark.asyncio
    async def test_ctrl_c_raises(self, terminal, scripted_keys) -> None:
        """ctrl-c aborts the whole run."""
        with pytest.raises(KeyboardInterrupt):
            await review_match(LINES, SPAN, OPTIONS, terminal=terminal, keys=scripted_keys(["ctrl-c"]))

    @pytest.mark.asyncio
    async def test_force_reads_no_keys(self, terminal, scripted_keys) -> None:
        """force draws once and applies without input."""
        keys = scripted_keys(["enter"])
        outcome = await review_match(
            LINES, SPAN, OPTIONS, terminal=terminal, keys=keys, force=True
        )
        assert outcome.action == "apply"
        assert keys.remaining == 1
        assert len(terminal.frames) == 1

    @pytest.mark.asyncio
    async def test_auto_expansion_announced(self, terminal, scripted_keys) -> None:
        """Carried patterns pre-expand the next match and say so."""
        carried = (ExtraLinePattern("// comment", "above", 1),)
        outcome = await review_match(
            LINES,
            SPAN,
            OPTIONS,
            terminal=terminal,
            keys=scripted_keys(["enter"]),
            extra_lines=carried,
        )
        assert outcome.start_line == 2
        assert "Auto-included +1 above" in terminal.frames[0][0]
