"""User-facing console feedback for CLI operations.

Design principles:
- Everything the operator reads goes to one rich console on stderr
- Single line updates, no spam
- Graceful degradation in non-TTY (CI, pipes)

Usage::

    from teamsync.core.progress import status, spinner

    status("Found 3 repos")
    status("Pushed", style="success")  # ✓ Pushed
    status("Push failed", style="error")  # ✗ Push failed

    with spinner("Updating 42 mirrors"):
        await mirrors.ensure_all(repos)
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

_console = Console(stderr=True)

# Style prefixes
_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from teamsync.core.logging import get_logger

    return get_logger("progress")


def _is_tty() -> bool:
    """Check if stderr is a TTY."""
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def get_console() -> Console:
    """Get the shared rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)

    _get_logger().debug("status", message=message, style=style)


@contextmanager
def spinner(message: str, *, indent: int = 0) -> Iterator[None]:
    """Context manager for a transient spinner.

    Usage::

        with spinner("Cloning 3 repos"):
            do_work()
    """
    padding = " " * indent
    if _is_tty():
        with _console.status(f"{padding}[cyan]{message}[/cyan]", spinner="dots"):
            yield
    else:
        _console.print(f"{padding}{message}...", highlight=False)
        yield


def banner(title: str, *, console: Console | None = None) -> None:
    """Print a blue section banner framed by rules."""
    c = console or _console
    c.print()
    c.print(Rule(style="blue"))
    c.print(Text(title, style="blue"))
    c.print(Rule(style="blue"))
    c.print()
