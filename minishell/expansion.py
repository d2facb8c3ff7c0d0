"""Dollar-sign variable expansion."""

from __future__ import annotations

import string

from minishell.state import ShellState

_NAME_START = frozenset(string.ascii_letters + "_")
_NAME_BODY = frozenset(string.ascii_letters + string.digits + "_")


def lookup(name: str, state: ShellState) -> str | None:
    """Return the value a ``$name`` reference stands for, or None if unset.

    ``?`` gives the last exit status; a name starting with a digit drops
    that digit and keeps the rest literally.
    """
    if name.startswith("?"):
        return str(state.exit_status)
    if name[:1].isdigit() and name[0] in string.digits:
        return name[1:]
    prefix = name + "="
    for entry in state.env:
        if entry.startswith(prefix):
            return entry[len(prefix):]
    return None


def _read_name(line: str, start: int) -> tuple[str, int]:
    if line[start:start + 1] == "?":
        return "?", start + 1
    end = start
    while end < len(line) and line[end] in _NAME_BODY:
        end += 1
    return line[start:end], end


def expand(line: str, state: ShellState) -> str:
    """Replace every ``$NAME`` and ``$?`` in line with its value."""
    parts: list[str] = []
    start = 0
    i = 0
    while i < len(line):
        following = line[i + 1:i + 2]
        if line[i] == "$" and (following == "?" or (following and following in _NAME_START)):
            parts.append(line[start:i])
            name, i = _read_name(line, i + 1)
            value = lookup(name, state)
            if value is not None:
                parts.append(value)
            start = i
        else:
            i += 1
    parts.append(line[start:])
    return "".join(parts)