"""Process-wide OS signal hooks: window resize, interrupt and exit.

The canvas and the loop only depend on the ``SignalSource`` protocol;
``ProcessSignals`` is the implementation backed by :mod:`signal` and
:mod:`atexit`.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import signal
import sys
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class SignalSource(Protocol):
    """Registration interface for the notifications the engine reacts to."""

    @property
    def supports_interrupt(self) -> bool: ...

    def on_resize(self, handler: Callable[[], None]) -> None: ...

    def on_interrupt(self, handler: Callable[[], None]) -> None: ...

    def on_exit(self, handler: Callable[[], None]) -> None: ...


class ProcessSignals:
    """Signal hooks of the current process.

    When an event loop is running, handlers are installed with
    ``loop.add_signal_handler`` so they run as loop callbacks, between
    ticks, instead of interrupting a frame half-way through.
    Handlers installed before the loop started are handed to it once it
    runs; with no loop at all they run inside the signal handler, and the
    canvas holds back a resize until its current frame is written.
    """

    def __init__(self) -> None:
        self._previous: dict[int, Any] = {}
        self._loop_signals: list[tuple[asyncio.AbstractEventLoop, int]] = []
        self._exit_handlers: list[Callable[[], None]] = []

    @property
    def supports_interrupt(self) -> bool:
        return sys.platform != "win32"

    def on_resize(self, handler: Callable[[], None]) -> None:
        sigwinch = getattr(signal, "SIGWINCH", None)
        if sigwinch is None:
            logger.debug("SIGWINCH unavailable; resize notifications disabled")
            return
        self._install(sigwinch, handler)

    def on_interrupt(self, handler: Callable[[], None]) -> None:
        self._install(signal.SIGINT, handler)

    def on_exit(self, handler: Callable[[], None]) -> None:
        atexit.register(handler)
        self._exit_handlers.append(handler)

    def restore(self) -> None:
        """Uninstall every handler registered through this object."""
        for loop, signum in self._loop_signals:
            try:
                loop.remove_signal_handler(signum)
            except (RuntimeError, ValueError):
                pass
        self._loop_signals.clear()

        for signum, previous in self._previous.items():
            signal.signal(signum, previous)
        self._previous.clear()

        for handler in self._exit_handlers:
            atexit.unregister(handler)
        self._exit_handlers.clear()

    # -- private ------------------------------------------------------------

    def _install(self, signum: int, handler: Callable[[], None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            try:
                loop.add_signal_handler(signum, handler)
                self._loop_signals.append((loop, signum))
                return
            except (NotImplementedError, RuntimeError):
                # Not supported by this loop (e.g. Windows proactor)
                pass

        if signum not in self._previous:
            self._previous[signum] = signal.getsignal(signum)
        signal.signal(signum, lambda _signum, _frame: self._dispatch(handler))

    @staticmethod
    def _dispatch(handler: Callable[[], None]) -> None:
        # A Python-level signal handler runs between any two bytecodes of the
        # main thread; with a loop running, the work waits for the next callback
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            handler()
            return
        loop.call_soon_threadsafe(handler)
