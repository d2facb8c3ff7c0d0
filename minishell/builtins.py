"""The cd, pwd, echo and exit built-ins, and built-in dispatch."""

from __future__ import annotations

import os
import sys

from minishell.environment import export_variables, print_env, unset_variables
from minishell.state import ShellExit, ShellState

_BUILTINS = frozenset({"cd", "pwd", "unset", "export", "env", "echo", "exit"})


def home_path(env: list[str]) -> str | None:
    """Return the value of the last HOME entry, or None."""
    home = None
    for entry in env:
        if entry.startswith("HOME="):
            home = entry[len("HOME="):]
    return home


def current_directory(state: ShellState) -> str | None:
    """Return the working directory, setting the status to 0 or 1."""
    try:
        cwd = os.getcwd()
    except OSError as error:
        print(
            f"pwd: error while retrieving current directory: getcwd: {error.strerror}",
            file=sys.stderr,
        )
        state.exit_status = 1
        return None
    state.exit_status = 0
    return cwd


def print_pwd(state: ShellState) -> None:
    """The pwd built-in."""
    cwd = current_directory(state)
    if cwd is not None:
        print(cwd)


def _replace_entry(env: list[str], prefix: str, value: str) -> bool:
    for index, entry in enumerate(env):
        if entry.startswith(prefix):
            env[index] = prefix + value
            return True
    return False


def _update_entry(state: ShellState, prefix: str) -> None:
    cwd = current_directory(state)
    if cwd is not None:
        _replace_entry(state.env, prefix, cwd)


def change_directory(state: ShellState, args: list[str]) -> None:
    """The cd built-in; args[0] is the command name."""
    if len(args) > 2:
        print("MINISHELL: cd: too many arguments", file=sys.stderr)
        state.exit_status = 1
        return
    home = home_path(state.env)
    target = args[1] if len(args) > 1 else None
    if target is None or target == "~":
        _update_entry(state, "OLDPWD=")
        if home is not None:
            try:
                os.chdir(home)
            except OSError:
                pass
        _update_entry(state, "PWD=")
        state.exit_status = 0
        return
    _update_entry(state, "OLDPWD=")
    try:
        os.chdir(target)
    except OSError as error:
        print(f"Minishell: cd: {target}: {error.strerror}", file=sys.stderr)
        state.exit_status = 1
        return
    _update_entry(state, "PWD=")
    state.exit_status = 0


def echo(state: ShellState, args: list[str]) -> None:
    """The echo built-in with leading ``-n`` options."""
    words = args[1:]
    if not words:
        print()
        return
    suppress_newline = words[0].startswith("-n")
    if suppress_newline:
        while words and words[0].startswith("-n"):
            words = words[1:]
    sys.stdout.write(" ".join(words))
    if not suppress_newline:
        sys.stdout.write("\n")
    sys.stdout.flush()
    state.exit_status = 0


def is_numeric(text: str) -> bool:
    """Tell whether text is an optionally signed run of decimal digits."""
    body = text[1:] if text[:1] in ("+", "-") else text
    if not body and text[:1] in ("+", "-"):
        return False
    return all(char in "0123456789" for char in body)


def exit_shell(state: ShellState, args: list[str], announce: bool) -> None:
    """The exit built-in; raises ShellExit unless given too many arguments."""
    if announce:
        print("exit")
        sys.stdout.flush()
    operands = args[1:]
    if operands:
        if not all(is_numeric(operand) for operand in operands):
            print(
                f"Minishell: exit: {operands[0]}: numeric argument required",
                file=sys.stderr,
            )
            raise ShellExit(1)
        if len(operands) > 1:
            print("Minishell: exit: too many arguments", file=sys.stderr)
            state.exit_status = 1
            return
        number = int(operands[0]) if operands[0] else 0
        state.exit_status = 256 + number if number < 0 else number
    raise ShellExit(state.exit_status & 0xFF)


def is_builtin(argv: list[str] | None) -> bool:
    """Tell whether argv names a built-in command."""
    return bool(argv) and argv[0] in _BUILTINS


def run_builtin(state: ShellState, argv: list[str], in_pipeline: bool) -> bool:
    """Run argv if it is a built-in and report whether it was one."""
    if not is_builtin(argv):
        return False
    name = argv[0]
    if name == "cd":
        change_directory(state, argv)
    elif name == "pwd":
        print_pwd(state)
    elif name == "unset":
        unset_variables(state, argv)
    elif name == "export":
        export_variables(state, argv)
    elif name == "env":
        print_env(state, argv)
    elif name == "echo":
        echo(state, argv)
    elif name == "exit":
        exit_shell(state, argv, announce=not in_pipeline)
    return True