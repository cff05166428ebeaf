"""Directories never descended into when scanning repository clones.

VCS_DIRS: version-control metadata. Never scanned.
DEPENDENCY_DIRS: package-manager and build-tool caches that mirror
third-party code. Rewriting them is never intended and scanning them
dominates the walk time in node and gradle repos.
"""

from __future__ import annotations

VCS_DIRS: frozenset[str] = frozenset(
    (
        ".git",
        ".svn",
        ".hg",
        ".bzr",
    )
)

DEPENDENCY_DIRS: frozenset[str] = frozenset(
    (
        # JavaScript/Node.js
        "node_modules",
        "bower_components",
        ".pnpm-store",
        ".yarn",
        # JVM
        ".gradle",
        ".m2",
    )
)

PRUNED_DIRS: frozenset[str] = VCS_DIRS | DEPENDENCY_DIRS


def is_pruned_dir(name: str) -> bool:
    """Return True if a directory with this name is never scanned."""
    return name in PRUNED_DIRS
