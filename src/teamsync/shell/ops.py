"""Shell command execution in repository clones."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from teamsync.core.errors import ExternalToolError
from teamsync.core.logging import get_logger

log = get_logger("shell")


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Outcome of one finished process."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


CommandRunner = Callable[[str, Path], Awaitable[ProcessResult]]
"""Signature of run_command, injectable wherever commands are fanned out."""


async def run_command(
    command: str,
    cwd: Path,
    *,
    env: Mapping[str, str] | None = None,
) -> ProcessResult:
    """Run a shell command string in ``cwd`` and capture its output.

    The command goes through the user's shell so pipes, globs and && chains
    behave as typed. A non-zero exit is a normal result, not an error.
    """
    log.debug("command_start", command=command, cwd=str(cwd))
    proc = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        stdin=asyncio.subprocess.DEVNULL,
        cwd=cwd,
        env={**os.environ, **env} if env else None,
    )
    stdout_bytes, stderr_bytes = await proc.communicate()
    result = ProcessResult(
        exit_code=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout_bytes.decode(errors="replace"),
        stderr=stderr_bytes.decode(errors="replace"),
    )
    log.debug("command_done", command=command, cwd=str(cwd), exit_code=result.exit_code)
    return result


async def run_exec(*args: str, cwd: Path | None = None) -> ProcessResult:
    """Run a program with explicit arguments (no shell)."""
    log.debug("exec_start", args=list(args), cwd=str(cwd) if cwd else None)
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        stdin=asyncio.subprocess.DEVNULL,
        cwd=cwd,
    )
    stdout_bytes, stderr_bytes = await proc.communicate()
    result = ProcessResult(
        exit_code=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout_bytes.decode(errors="replace"),
        stderr=stderr_bytes.decode(errors="replace"),
    )
    log.debug("exec_done", program=args[0], exit_code=result.exit_code)
    return result


async def run_tool(*args: str, cwd: Path | None = None) -> str:
    """Run an external tool and return its stdout.

    A missing binary or a non-zero exit raises ``ExternalToolError``.
    """
    try:
        result = await run_exec(*args, cwd=cwd)
    except FileNotFoundError as e:
        raise ExternalToolError.failed(args[0], 127, f"{args[0]} not found on PATH") from e
    if not result.ok:
        raise ExternalToolError.failed(args[0], result.exit_code, result.stderr)
    return result.stdout
