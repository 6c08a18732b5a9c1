"""Terminal writer backed by the process's stdout.

``ProcessTerminal`` is the default ``Writer`` and size source of the engine:
it writes escape sequences and frame data straight to ``sys.stdout`` and
reports the current window size.
"""

from __future__ import annotations

import os
import sys

from termframe.types import ConsoleSize

_FALLBACK_ROWS = 24
_FALLBACK_COLUMNS = 80


class ProcessTerminal:
    """Writes to ``sys.stdout``, optionally mirroring output to a log file."""

    def __init__(self, write_log: str = "") -> None:
        self._write_log_path = write_log

    # -- size ---------------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return _FALLBACK_COLUMNS

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return _FALLBACK_ROWS

    def size(self) -> ConsoleSize:
        return ConsoleSize(self.rows, self.columns)

    # -- write --------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                pass

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing buffering."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass
