"""Reading a file descriptor one line at a time."""

from __future__ import annotations

import os
from collections.abc import Iterator

DEFAULT_BUFFER_SIZE = 1


class LineReader:
    """Return successive lines from a descriptor, keeping unread data between calls.

    Each line keeps its trailing newline; the last line of the input may lack one.
    """

    def __init__(self, fd: int, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.fd = fd
        self.buffer_size = buffer_size
        self._pending = b""

    def _fill(self) -> bool:
        """Read chunks until the pending data holds a newline or input ends.

        Returns False if reading failed; the pending data is then discarded.
        """
        while b"\n" not in self._pending:
            try:
                chunk = os.read(self.fd, self.buffer_size)
            except OSError:
                self._pending = b""
                return False
            if not chunk:
                break
            self._pending += chunk
        return True

    def next_line(self) -> str | None:
        """Return the next line, or None at end of input or on a read error."""
        if self.fd < 0:
            return None
        if not self._fill() or not self._pending:
            return None
        line, newline, rest = self._pending.partition(b"\n")
        self._pending = rest
        return (line + newline).decode("utf-8", errors="surrogateescape")

    def __iter__(self) -> Iterator[str]:
        while (line := self.next_line()) is not None:
            yield line


_readers: dict[int, LineReader] = {}


def get_next_line(fd: int) -> str | None:
    """Return the next line of fd, remembering unread data for each descriptor."""
    if fd < 0:
        return None
    reader = _readers.get(fd)
    if reader is None:
        reader = _readers[fd] = LineReader(fd)
    line = reader.next_line()
    if line is None:
        del _readers[fd]
    return line