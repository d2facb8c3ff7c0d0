"""Opening redirection targets, here-documents and restoring the standard streams."""

from __future__ import annotations

import errno
import os
import signal
import sys
import tempfile
import threading
from collections.abc import Callable

from minishell.expansion import expand
from minishell.state import (
    ShellState,
    get_signal_status,
    heredoc_interrupt_handler,
    set_signal_status,
)

ReadLine = Callable[[str], "str | None"]


def _status_for(error: OSError) -> int:
    if error.errno == errno.ENOENT:
        return 127
    if error.errno == errno.EACCES:
        return 126
    return 1


def _open_target(state: ShellState, target: str, flags: int) -> int | None:
    try:
        return os.open(target, flags, 0o644)
    except OSError as error:
        print(f"Minishell : {target}: {error.strerror}", file=sys.stderr)
        state.exit_status = _status_for(error)
        return None


def open_input(state: ShellState, target: str) -> bool:
    """Open target for reading as the next command's input."""
    fd = _open_target(state, target, os.O_RDONLY)
    if fd is None:
        return False
    state.fd_in_child = fd
    return True


def open_output(state: ShellState, target: str) -> bool:
    """Create or truncate target as the next command's output."""
    fd = _open_target(state, target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC)
    if fd is None:
        return False
    state.fd_out_child = fd
    return True


def open_append(state: ShellState, target: str) -> bool:
    """Open target for appending as the next command's output."""
    fd = _open_target(state, target, os.O_WRONLY | os.O_CREAT | os.O_APPEND)
    if fd is None:
        return False
    state.fd_out_child = fd
    return True


def heredoc_filename() -> str:
    """Return the temporary file path used for this process's here-documents."""
    return os.path.join(tempfile.gettempdir(), f".heredoc_{os.getpid()}.tmp")


def _prompt_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _collect_heredoc(
    state: ShellState, delimiter: str | None, read_line: ReadLine, out
) -> bool:
    """Write expanded lines to out until the delimiter; False if interrupted."""
    while True:
        try:
            line = read_line("> ")
        except KeyboardInterrupt:
            set_signal_status(130)
            return False
        if line is None or not delimiter or line == delimiter:
            if line is None and get_signal_status() != 130:
                print(
                    "Minishell: warning: here-document delimited by end-of-file "
                    f"(wanted {delimiter})",
                    file=sys.stderr,
                )
            return True
        out.write(expand(line, state) + "\n")


def read_heredoc(
    state: ShellState, delimiter: str | None, read_line: ReadLine | None = None
) -> bool:
    """Read a here-document and make it the next command's input."""
    reader = read_line or _prompt_line
    filename = heredoc_filename()
    state.heredoc = filename
    in_main_thread = threading.current_thread() is threading.main_thread()
    previous = signal.signal(signal.SIGINT, heredoc_interrupt_handler) if in_main_thread else None
    try:
        try:
            with open(filename, "w", encoding="utf-8") as out:
                completed = _collect_heredoc(state, delimiter, reader, out)
        except OSError as error:
            print(f"Minishell : {filename}: {error.strerror}", file=sys.stderr)
            state.exit_status = 126
            state.heredoc = None
            return False
    finally:
        if in_main_thread:
            signal.signal(signal.SIGINT, previous)
    if not completed:
        try:
            os.unlink(filename)
        except OSError:
            pass
        state.heredoc = None
        return False
    try:
        fd = os.open(filename, os.O_RDONLY)
    except OSError as error:
        print(f"Minishell: {filename}: {error.strerror}", file=sys.stderr)
        state.exit_status = 126
        return False
    os.unlink(filename)
    state.heredoc = None
    state.fd_in_child = fd
    state.exit_status = 0
    return True


def apply_redirection(
    state: ShellState, entry: list[str], read_line: ReadLine | None = None
) -> bool:
    """Perform the redirection a command-table entry describes."""
    operator = entry[0] if entry else None
    target = entry[1] if len(entry) > 1 else None
    if operator == "<":
        return open_input(state, target)
    if operator == ">":
        return open_output(state, target)
    if operator == ">>":
        return open_append(state, target)
    if operator == "<<":
        return read_heredoc(state, target, read_line)
    return True


def restore_standard_streams(state: ShellState) -> None:
    """Put back the saved standard input and output and close the copies."""
    if state.saved_streams is None:
        return
    saved_in, saved_out = state.saved_streams
    sys.stdout.flush()
    os.dup2(saved_in, 0)
    os.dup2(saved_out, 1)
    os.close(saved_in)
    os.close(saved_out)
    state.saved_streams = None