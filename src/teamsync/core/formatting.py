"""Formatting helpers for CLI output."""

from __future__ import annotations


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Args:
        count: The number of items
        singular: Singular form (e.g., "file")
        plural: Plural form (default: singular + "s")

    Returns:
        Formatted string like "1 file" or "3 files"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def tail_lines(text: str, count: int) -> list[str]:
    """Return the last ``count`` non-blank lines of ``text``.

    Examples:
        "a\\n\\nb\\nc\\n" with count=2 -> ["b", "c"]
    """
    if count <= 0:
        return []
    lines = [line for line in text.splitlines() if line.strip()]
    return lines[-count:]
