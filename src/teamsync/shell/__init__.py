"""Process execution."""

from teamsync.shell.ops import CommandRunner, ProcessResult, run_command, run_exec, run_tool

__all__ = [
    "CommandRunner",
    "ProcessResult",
    "run_command",
    "run_exec",
    "run_tool",
]
