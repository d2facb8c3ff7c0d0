"""Running a command table: single built-ins, redirections and pipelines."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
from collections.abc import Callable, Iterable
from contextlib import redirect_stdout

from minishell.builtins import is_builtin, run_builtin
from minishell.pathsearch import (
    is_directory,
    report_command_not_found,
    report_exec_failure,
    resolve_command,
)
from minishell.redirections import apply_redirection, restore_standard_streams
from minishell.state import ShellExit, ShellState
from minishell.tokens import (
    has_later_input,
    has_later_output,
    is_redirection,
    restore_quoted_operators,
)

Waiter = Callable[[], int]


def _entry(table: list[list[str]], index: int) -> list[str] | None:
    return table[index] if 0 <= index < len(table) else None


def _is_pipe(entry: list[str] | None) -> bool:
    return bool(entry) and entry[0][:1] == "|"


def _close(fd: int | None) -> None:
    if fd is not None:
        try:
            os.close(fd)
        except OSError:
            pass


def _close_child_fds(state: ShellState) -> None:
    _close(state.fd_in_child)
    _close(state.fd_out_child)
    state.fd_in_child = None
    state.fd_out_child = None


def _drop_superseded(state: ShellState, table: list[list[str]], index: int) -> None:
    """Close descriptors that a later redirection of the same stage replaces."""
    if has_later_input(table, index) and state.fd_in_child is not None:
        _close(state.fd_in_child)
        state.fd_in_child = None
    if has_later_output(table, index) and state.fd_out_child is not None:
        _close(state.fd_out_child)
        state.fd_out_child = None


def _apply_stage_redirections(
    state: ShellState, table: list[list[str]], start: int
) -> tuple[int, bool]:
    """Apply the redirections starting at start; return the next index and success."""
    index = start
    while is_redirection(_entry(table, index)):
        if not apply_redirection(state, table[index]):
            return index, False
        _drop_superseded(state, table, index)
        index += 1
    return index, True


def _after_pipe(table: list[list[str]], index: int) -> int:
    """Return the index just past the next pipe entry at or after index."""
    while (entry := _entry(table, index)) is not None and not _is_pipe(entry):
        index += 1
    return index + 1


def count_blocks(table: list[list[str]]) -> int:
    """Count the pipeline stages that hold a command or a redirection."""
    count = 0
    has_content = False
    for entry in table:
        if not entry:
            continue
        if _is_pipe(entry):
            if has_content:
                count += 1
            has_content = False
        else:
            has_content = True
    if has_content:
        count += 1
    return count


def is_only_redirection(table: list[list[str]]) -> bool:
    """Tell whether the first pipeline stage consists of redirections alone."""
    for entry in table:
        if _is_pipe(entry):
            break
        if not is_redirection(entry):
            return False
    return True


def _run_builtin_here(state: ShellState, argv: list[str]) -> None:
    try:
        if state.fd_out_child is None:
            run_builtin(state, argv, in_pipeline=False)
        else:
            with open(
                state.fd_out_child, "w", closefd=False, encoding="utf-8"
            ) as out, redirect_stdout(out):
                run_builtin(state, argv, in_pipeline=False)
    finally:
        _close_child_fds(state)


def run_single_builtin(state: ShellState) -> bool:
    """Run a lone built-in in the shell itself.

    Returns False if the command is not a built-in; True once it has been
    handled, including when one of its redirections failed.
    """
    table = state.table
    index = 0
    while is_redirection(_entry(table, index)):
        index += 1
    if not is_builtin(_entry(table, index)):
        return False
    _, ok = _apply_stage_redirections(state, table, 0)
    if not ok:
        _close_child_fds(state)
        return True
    restore_quoted_operators(table)
    _run_builtin_here(state, table[index])
    return True


def _default_signals() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def _fixed(status: int) -> Waiter:
    return lambda: status


def _spawn_external(
    state: ShellState, argv: list[str], stdin: int | None, stdout: int | None
) -> Waiter:
    path = resolve_command(argv[0], state.env)
    if is_directory(path):
        return _fixed(126)
    if path is None:
        report_command_not_found(state, argv[0])
        return _fixed(127)
    env = dict(entry.split("=", 1) for entry in state.env if "=" in entry)
    try:
        process = subprocess.Popen(
            argv,
            executable=path,
            stdin=stdin,
            stdout=stdout,
            env=env,
            preexec_fn=_default_signals,
        )
    except OSError:
        report_exec_failure(state)
        return _fixed(126)
    return process.wait


def _run_forked_builtin(
    state: ShellState,
    argv: list[str],
    stdin: int | None,
    stdout: int | None,
    extra: Iterable[int | None],
) -> None:
    status = 1
    try:
        _default_signals()
        if stdin is not None:
            os.dup2(stdin, 0)
        if stdout is not None:
            os.dup2(stdout, 1)
        leftovers = {stdin, stdout, *extra}
        if state.saved_streams is not None:
            leftovers.update(state.saved_streams)
        for fd in leftovers - {None, 0, 1, 2}:
            _close(fd)
        state.saved_streams = None
        state.fd_in_child = None
        state.fd_out_child = None
        sys.stdin = open(0, closefd=False, encoding="utf-8")
        sys.stdout = open(1, "w", closefd=False, encoding="utf-8")
        run_builtin(state, argv, in_pipeline=True)
        status = state.exit_status
    except ShellExit as exc:
        status = exc.status
    except BaseException:
        status = 1
    finally:
        try:
            sys.stdout.flush()
            sys.stderr.flush()
        except Exception:
            pass
        os._exit(status & 0xFF)


def _spawn_builtin(
    state: ShellState,
    argv: list[str],
    stdin: int | None,
    stdout: int | None,
    extra: Iterable[int | None],
) -> Waiter:
    sys.stdout.flush()
    sys.stderr.flush()
    pid = os.fork()
    if pid == 0:
        _run_forked_builtin(state, argv, stdin, stdout, tuple(extra))
    return lambda: os.waitstatus_to_exitcode(os.waitpid(pid, 0)[1])


def _run_stages(state: ShellState, table: list[list[str]]) -> list[Waiter]:
    count = count_blocks(table)
    waiters: list[Waiter] = []
    if count == 0:
        return waiters
    if is_only_redirection(table):
        for entry in table:
            apply_redirection(state, entry)
            _close_child_fds(state)
        return waiters
    if count == 1 and run_single_builtin(state):
        return waiters
    index = 0
    previous: int | None = None
    try:
        for stage in range(count):
            last = stage == count - 1
            read_end: int | None = None
            write_end: int | None = None
            if not last:
                try:
                    read_end, write_end = os.pipe()
                except OSError:
                    print("Minishell: error pipe", file=sys.stderr)
                    for wait in waiters:
                        wait()
                    state.exit_status = 1
                    return []
            index, ok = _apply_stage_redirections(state, table, index)
            if not ok:
                _close_child_fds(state)
                _close(write_end)
                _close(previous)
                previous = read_end
                index = _after_pipe(table, index)
                continue
            restore_quoted_operators(table)
            argv = _entry(table, index)
            if argv is None or _is_pipe(argv):
                _close(read_end)
                _close(write_end)
                break
            stdin = state.fd_in_child if state.fd_in_child is not None else previous
            stdout = state.fd_out_child if state.fd_out_child is not None else write_end
            if is_builtin(argv):
                extra = (read_end, write_end, previous, state.fd_in_child, state.fd_out_child)
                waiters.append(_spawn_builtin(state, argv, stdin, stdout, extra))
            else:
                waiters.append(_spawn_external(state, argv, stdin, stdout))
            index = _after_pipe(table, index)
            _close(previous)
            _close(write_end)
            previous = read_end
            _close_child_fds(state)
    finally:
        _close(previous)
    return waiters


def _status_from_code(code: int) -> int:
    if code >= 0:
        return code
    signum = -code
    if signum == signal.SIGQUIT:
        print("Quit (core dumped)", file=sys.stderr)
    return 128 + signum


def _collect(state: ShellState, waiters: list[Waiter]) -> None:
    for position, wait in enumerate(waiters):
        try:
            code = wait()
        except ChildProcessError:
            print("Minishell: error waitpid", file=sys.stderr)
            raise ShellExit(1) from None
        if position == len(waiters) - 1:
            state.exit_status = _status_from_code(code)


def execute(state: ShellState) -> None:
    """Run the command table held in state, then clear it.

    The exit status of the last stage becomes the shell's status. A
    ShellExit raised by the exit built-in propagates once the standard
    streams have been restored.
    """
    table = state.table
    sys.stdout.flush()
    state.saved_streams = (os.dup(0), os.dup(1))
    try:
        waiters = _run_stages(state, table)
        _collect(state, waiters)
    finally:
        _close_child_fds(state)
        restore_standard_streams(state)
        state.table = []