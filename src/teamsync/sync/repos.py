"""Choosing which repositories an operation touches."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Literal

import questionary

from teamsync.core.progress import status
from teamsync.sync import prompts

RepoType = Literal["all", "jvm", "node"]

REPO_TYPES: tuple[RepoType, ...] = ("all", "jvm", "node")

# GitHub repo names never contain ":"
_ALL = ":all"
_TRACKED = ":tracked"

_MARKERS: dict[RepoType, tuple[str, ...]] = {
    "jvm": ("build.gradle.kts", "build.gradle", "pom.xml"),
    "node": ("package.json",),
}


def is_repo_of_type(repo_dir: Path, repo_type: RepoType) -> bool:
    """True if the clone has a build file of ``repo_type`` at its root."""
    if repo_type == "all":
        return True
    return any((repo_dir / marker).exists() for marker in _MARKERS[repo_type])


async def select_repos(
    names: Sequence[str],
    tracked: Iterable[str] = (),
    *,
    message: str = "Select repos to apply changes to",
) -> list[str]:
    """Pick repo names until at least one is chosen.

    Offers "All repos", "Only tracked repos" (when any are tracked) and each
    repo individually. Order of ``names`` is kept.
    """
    tracked_names = set(tracked)
    tracked_in_names = [n for n in names if n in tracked_names]
    choices = [questionary.Choice("All repos", value=_ALL)]
    if tracked_in_names:
        choices.append(
            questionary.Choice(f"Only tracked repos ({len(tracked_in_names)})", value=_TRACKED)
        )
    choices.extend(
        questionary.Choice(f"{n} (tracked)" if n in tracked_names else n, value=n) for n in names
    )

    while True:
        answer = await prompts.checkbox(message, choices)
        if _ALL in answer:
            return list(names)
        if _TRACKED in answer:
            return tracked_in_names
        if answer:
            return [n for n in names if n in answer]
        status("[red]You must select at least one repo[/red]")
