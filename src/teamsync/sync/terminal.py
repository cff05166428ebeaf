"""Terminal output and raw key input used by the match review.

The review engine only ever calls ``render``, ``clear`` and ``read``;
cursor movement escapes and raw-mode handling stay in this module.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Protocol

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.keys import Keys
from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

from teamsync.core.progress import get_console


class Terminal(Protocol):
    """Block-redrawable output."""

    def render(self, lines: Sequence[Text]) -> None:
        """Draw ``lines``, one terminal row each."""
        ...

    def clear(self) -> None:
        """Erase everything drawn by the most recent ``render``."""
        ...


class KeySource(Protocol):
    """Yields key names: ``up``, ``down``, ``enter``, ``ctrl-c`` or a character."""

    async def read(self) -> str: ...


class ConsoleTerminal:
    """Terminal backed by a rich console.

    Lines are cropped to the console width rather than wrapped, so the
    number of rows to erase always equals the number of lines rendered.
    On a non-terminal console the erase codes are dropped by rich and each
    frame is simply appended.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or get_console()
        self._rows = 0

    def render(self, lines: Sequence[Text]) -> None:
        for line in lines:
            self._console.print(line, no_wrap=True, overflow="crop", crop=True, highlight=False)
        self._rows = len(lines)

    def clear(self) -> None:
        if not self._rows:
            return
        erase_row = ((ControlType.CURSOR_UP, 1), (ControlType.ERASE_IN_LINE, 2))
        self._console.control(Control(ControlType.CARRIAGE_RETURN, *erase_row * self._rows))
        self._rows = 0


_KEY_NAMES: dict[str, str] = {
    Keys.Up: "up",
    Keys.Down: "down",
    Keys.ControlM: "enter",
    Keys.ControlJ: "enter",
    Keys.ControlC: "ctrl-c",
}


class PromptToolkitKeys:
    """Reads single keypresses from stdin in raw mode."""

    def __init__(self, terminal_input: Input | None = None) -> None:
        self._input = terminal_input
        self._queue: asyncio.Queue[str] = asyncio.Queue()

    def _on_keys(self) -> None:
        assert self._input is not None
        for press in self._input.read_keys():
            self._queue.put_nowait(_KEY_NAMES.get(press.key, press.data))

    async def read(self) -> str:
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self._input is None:
            self._input = create_input()
        with self._input.raw_mode(), self._input.attach(self._on_keys):
            return await self._queue.get()
