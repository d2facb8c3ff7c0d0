"""Shared shell state, exit signalling and interactive signal handlers."""

from __future__ import annotations

import os
import signal
import sys
from dataclasses import dataclass, field

_signal_status = 0


def get_signal_status() -> int:
    """Return the status recorded by the most recent signal handler."""
    return _signal_status


def set_signal_status(value: int) -> None:
    """Record a status produced by a signal."""
    global _signal_status
    _signal_status = value


class ShellExit(Exception):
    """Raised to leave the shell with a given exit status."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


@dataclass
class ShellState:
    """Everything a running shell carries between commands."""

    env: list[str] = field(default_factory=list)
    exit_status: int = 0
    table: list[list[str]] = field(default_factory=list)
    fd_in_child: int | None = None
    fd_out_child: int | None = None
    saved_streams: tuple[int, int] | None = None
    heredoc: str | None = None

    def close_descriptors(self) -> None:
        """Close every descriptor the state holds and drop the command table."""
        descriptors = [self.fd_in_child, self.fd_out_child]
        if self.saved_streams is not None:
            descriptors.extend(self.saved_streams)
        for fd in descriptors:
            if fd is not None and fd >= 0:
                try:
                    os.close(fd)
                except OSError:
                    pass
        self.fd_in_child = None
        self.fd_out_child = None
        self.saved_streams = None
        self.table = []


def interrupt_handler(signum, frame) -> None:
    """Handle Ctrl-C at the prompt: start a fresh line."""
    sys.stdout.write("\n")
    sys.stdout.flush()
    set_signal_status(130)


def heredoc_interrupt_handler(signum, frame) -> None:
    """Handle Ctrl-C while a here-document is being read: abort the read."""
    sys.stdout.write("\n")
    sys.stdout.flush()
    set_signal_status(130)
    raise KeyboardInterrupt


def quit_handler(signum, frame) -> None:
    """Record a quit request."""
    set_signal_status(131)


def set_signals() -> None:
    """Install the interactive prompt's signal dispositions."""
    signal.signal(signal.SIGINT, interrupt_handler)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)