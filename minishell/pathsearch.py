"""Locating executables on PATH and reporting launch failures."""

from __future__ import annotations

import os
import sys

from minishell.state import ShellState


def find_path(env: list[str]) -> list[str] | None:
    """Split the first PATH entry into its non-empty directories."""
    for entry in env:
        if entry.startswith("PATH="):
            return [part for part in entry[len("PATH="):].split(":") if part]
    return None


def build_full(directory: str, command: str) -> str:
    """Join a directory and a command name."""
    return f"{directory}/{command}"


def is_directory(path: str | None) -> bool:
    """Tell whether path can be opened as a directory, reporting it if so."""
    if path is None:
        return False
    try:
        with os.scandir(path):
            pass
    except OSError:
        return False
    print(f"Minishell: {path}: Is a directory", file=sys.stderr)
    return True


def resolve_command(command: str, env: list[str]) -> str | None:
    """Find an executable for command.

    The command itself is tried in place of the first PATH directory; the
    remaining directories are searched in order.
    """
    directories = find_path(env)
    if directories is None:
        return None
    for position, directory in enumerate(directories):
        candidate = command if position == 0 else build_full(directory, command)
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def report_command_not_found(state: ShellState, command: str) -> None:
    """Report an unknown command and set status 127."""
    print(f"minishell: {command}: command not found", file=sys.stderr)
    state.exit_status = 127


def report_exec_failure(state: ShellState) -> None:
    """Report a failed program launch and set status 1."""
    state.exit_status = 1
    print("minishell: execve failed!", file=sys.stderr)