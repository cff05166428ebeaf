"""Async questionary prompts.

Every prompt uses ``unsafe_ask_async`` so Ctrl-C raises KeyboardInterrupt
instead of returning None; click reports it as "Aborted!".
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click
import questionary
from prompt_toolkit.history import InMemoryHistory

STYLE = questionary.Style(
    [
        ("question", "bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:cyan"),
        ("instruction", "fg:#808080"),
    ]
)

EDITOR_SHORTCUT = "e"


async def confirm(message: str, *, default: bool = True) -> bool:
    return bool(await questionary.confirm(message, default=default, style=STYLE).unsafe_ask_async())


async def select(
    message: str,
    choices: Sequence[questionary.Choice | str],
    *,
    default: Any = None,
    search: bool = False,
) -> Any:
    """Single choice. ``search`` enables type-to-filter for long lists."""
    return await questionary.select(
        message,
        choices=list(choices),
        default=default,
        use_search_filter=search,
        use_jk_keys=not search,
        style=STYLE,
    ).unsafe_ask_async()


async def checkbox(message: str, choices: Sequence[questionary.Choice | str]) -> list[Any]:
    return list(
        await questionary.checkbox(message, choices=list(choices), style=STYLE).unsafe_ask_async()
    )


async def text(message: str, *, default: str = "") -> str:
    return str(await questionary.text(message, default=default, style=STYLE).unsafe_ask_async())


async def text_with_history(
    message: str,
    entries: Sequence[str],
    *,
    default: str | None = None,
) -> str:
    """Free text where the up arrow walks previous answers (newest first).

    A blank answer falls back to ``default``.
    """
    instruction = f"({default})" if default else None
    answer = await questionary.text(
        message,
        instruction=instruction,
        history=InMemoryHistory(list(reversed(entries))),
        style=STYLE,
    ).unsafe_ask_async()
    return str(answer).strip() or default or ""


async def replacement_input(message: str, entries: Sequence[str]) -> str | None:
    """Replacement text, typed inline or written in $EDITOR.

    Answering ``e`` opens the editor seeded with the most recent
    replacement. Returns None for an empty answer.
    """
    answer = await questionary.text(
        message,
        instruction=f"(type inline, or {EDITOR_SHORTCUT} for editor)",
        history=InMemoryHistory(list(reversed(entries))),
        style=STYLE,
    ).unsafe_ask_async()
    answer = str(answer)
    if answer.strip() == EDITOR_SHORTCUT:
        edited = click.edit(entries[0] if entries else "")
        return (edited or "").rstrip() or None
    return answer.strip() or None
