"""Tests for sync.terminal.

Covers:
- ConsoleTerminal redraw: one cursor-up per rendered row, nothing left behind
- Key name mapping and PromptToolkitKeys reading from a pipe input
"""

from __future__ import annotations

import io

import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.keys import Keys
from rich.console import Console
from rich.text import Text

from teamsync.sync.terminal import _KEY_NAMES, ConsoleTerminal, PromptToolkitKeys

CURSOR_UP = "\x1b[1A"


def _console(width: int = 10) -> Console:
    return Console(file=io.StringIO(), force_terminal=True, width=width, color_system=None)


class TestConsoleTerminal:
    """Tests for ConsoleTerminal."""

    def test_clear_moves_up_once_per_rendered_line(self) -> None:
        """Over-wide and tabbed lines are cropped, so each takes exactly one row."""
        console = _console()
        terminal = ConsoleTerminal(console)
        lines = [Text("short"), Text("a line far wider than ten columns"), Text("\tindented\tmore")]

        terminal.render(lines)
        drawn = console.file.getvalue()
        terminal.clear()
        erased = console.file.getvalue()[len(drawn) :]

        assert drawn.count("\n") == len(lines)
        assert CURSOR_UP not in drawn
        assert erased.count(CURSOR_UP) == len(lines)

    def test_clear_without_render_is_noop(self) -> None:
        console = _console()
        ConsoleTerminal(console).clear()
        assert console.file.getvalue() == ""

    def test_second_clear_is_noop(self) -> None:
        """Only the most recent render is erased, and only once."""
        console = _console()
        terminal = ConsoleTerminal(console)
        terminal.render([Text("one"), Text("two")])
        terminal.clear()
        before = console.file.getvalue()
        terminal.clear()
        assert console.file.getvalue() == before

    def test_rerender_erases_latest_frame_only(self) -> None:
        console = _console()
        terminal = ConsoleTerminal(console)
        terminal.render([Text("a"), Text("b"), Text("c")])
        terminal.clear()
        terminal.render([Text("d")])
        mark = len(console.file.getvalue())
        terminal.clear()
        assert console.file.getvalue()[mark:].count(CURSOR_UP) == 1


class TestKeyNames:
    """Tests for the prompt_toolkit key mapping."""

    def test_named_keys(self) -> None:
        assert _KEY_NAMES[Keys.Up] == "up"
        assert _KEY_NAMES[Keys.Down] == "down"
        assert _KEY_NAMES[Keys.ControlM] == "enter"
        assert _KEY_NAMES[Keys.ControlC] == "ctrl-c"


class TestPromptToolkitKeys:
    """Tests for PromptToolkitKeys."""

    @pytest.mark.asyncio
    async def test_reads_characters_and_enter(self) -> None:
        """Plain characters pass through; Enter maps to its name."""
        with create_pipe_input() as pipe:
            pipe.send_text("q\r")
            keys = PromptToolkitKeys(pipe)
            first = await keys.read()
            second = await keys.read()

        assert first == "q"
        assert second == "enter"
