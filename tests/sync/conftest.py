"""Fakes shared by the sync tests."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pytest
from rich.text import Text


class RecordingTerminal:
    """Terminal that keeps every frame instead of drawing it."""

    def __init__(self) -> None:
        self.frames: list[list[str]] = []
        self.clears = 0

    def render(self, lines: Sequence[Text]) -> None:
        self.frames.append([line.plain for line in lines])

    def clear(self) -> None:
        self.clears += 1


class ScriptedKeys:
    """Key source replaying a fixed sequence of key names."""

    def __init__(self, keys: Iterable[str]) -> None:
        self._keys = list(keys)

    async def read(self) -> str:
        if not self._keys:
            raise AssertionError("review asked for more keys than scripted")
        return self._keys.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._keys)


@pytest.fixture
def terminal() -> RecordingTerminal:
    return RecordingTerminal()


@pytest.fixture
def scripted_keys() -> type[ScriptedKeys]:
    return ScriptedKeys
