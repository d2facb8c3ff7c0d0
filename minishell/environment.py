"""Environment list handling and the env, export and unset built-ins."""

from __future__ import annotations

import string
import sys
from collections.abc import Iterable, Mapping

from minishell.state import ShellState

_UNDERSCORE_ENTRY = "_=/built-ins/ft_env"
_IDENT_START = frozenset(string.ascii_letters + "_")
_EXPORT_BODY = frozenset(string.ascii_letters + string.digits + "_=\"'")
_UNSET_BODY = frozenset(string.ascii_letters + string.digits + "_")


def from_environ(environ: Mapping[str, str] | Iterable[str]) -> list[str]:
    """Build the shell's environment list from a mapping or NAME=VALUE strings."""
    if isinstance(environ, Mapping):
        entries: Iterable[str] = (f"{name}={value}" for name, value in environ.items())
    else:
        entries = environ
    return [_UNDERSCORE_ENTRY if entry.startswith("_=") else entry for entry in entries]


def is_valid_export_identifier(arg: str) -> bool:
    """Check the name part of an export argument."""
    if not arg or arg[0] not in _IDENT_START:
        return False
    name = arg[1:].partition("=")[0]
    return all(char in _EXPORT_BODY for char in name)


def has_assignment(entry: str) -> bool:
    """Tell whether an environment entry carries a value."""
    return "=" in entry


def _names_entry(entry: str, name: str) -> bool:
    return entry.startswith(name) and entry[len(name):len(name) + 1] in ("=", "")


def find_variable(env: list[str], arg: str) -> int | None:
    """Return the index of the entry whose name matches arg's name, or None."""
    name = arg.partition("=")[0]
    for index, entry in enumerate(env):
        if _names_entry(entry, name):
            return index
    return None


def strip_quotes(text: str) -> str:
    """Remove every single and double quote character."""
    return text.replace('"', "").replace("'", "")


def declarations(env: list[str]) -> list[str]:
    """Lines that export prints without arguments, sorted by name."""
    lines = []
    for entry in sorted(env):
        if entry.startswith("_="):
            continue
        name, sep, value = entry.partition("=")
        if sep:
            lines.append(f'declare -x {name}="{value}"')
        else:
            lines.append(f"declare -x {name}")
    return lines


def export_variables(state: ShellState, args: list[str]) -> None:
    """The export built-in; args[0] is the command name."""
    operands = args[1:]
    if not operands:
        for line in declarations(state.env):
            print(line)
        state.exit_status = 0
        return
    accepted = []
    for arg in operands:
        if is_valid_export_identifier(arg):
            accepted.append(strip_quotes(arg))
        else:
            print(f"Minishell: export: '{arg}' : not a valid identifier", file=sys.stderr)
            state.exit_status = 1
    env = list(state.env)
    for entry in accepted:
        index = find_variable(env, entry)
        if index is None:
            env.append(entry)
        else:
            env[index] = entry
    state.env = env


def is_valid_unset_identifier(name: str, state: ShellState) -> bool:
    """Check an unset operand, reporting it and setting status 1 if invalid."""
    valid = bool(name) and name[0] in _IDENT_START and all(
        char in _UNSET_BODY for char in name[1:]
    )
    if not valid:
        print(f"Minishell: unset: {name}: not a valid identifier", file=sys.stderr)
        state.exit_status = 1
    return valid


def unset_variables(state: ShellState, args: list[str]) -> None:
    """The unset built-in; args[0] is the command name."""
    names = args[1:]
    if not names:
        state.exit_status = 1
        return
    valid = [name for name in names if is_valid_unset_identifier(name, state)]
    state.env = [
        entry for entry in state.env if not any(_names_entry(entry, name) for name in valid)
    ]


def print_env(state: ShellState, args: list[str]) -> None:
    """The env built-in: print every entry that has a value."""
    if len(args) > 1:
        print(f"Minishell: env: '{args[1]}': No arguments allowed", file=sys.stderr)
        state.exit_status = 2
        return
    for entry in state.env:
        if has_assignment(entry):
            print(entry)
    state.exit_status = 0