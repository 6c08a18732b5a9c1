"""Update/render loop driving a canvas and its components.

Two cadences run side by side: the *update* cadence redraws every component
on the frame buffer, the *render* cadence (the canvas's own
:meth:`~termframe.canvas.Canvas.frames`) pushes the frame buffer to the
terminal.  :meth:`Tui.run` merges both into one stream, handling each tick
in the order it became ready.
"""

from __future__ import annotations

import asyncio
import bisect
import logging
import sys
import time
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from termframe.canvas import SHOW_CURSOR, Canvas
from termframe.config import TuiConfig
from termframe.event_emitter import EventEmitter
from termframe.merge import combine
from termframe.signals import ProcessSignals, SignalSource
from termframe.styler import compile_styler
from termframe.terminal import ProcessTerminal
from termframe.types import Component, KeyPress, Timing

logger = logging.getLogger(__name__)

__all__ = ["Tick", "Tui", "TuiEvent", "create_tui"]

TuiEvent = Literal[
    "update",
    "render",
    "key_press",
    "close",
    "add_component",
    "remove_component",
]


@dataclass(frozen=True)
class Tick:
    """One item of the merged update/render stream."""

    type: Literal["update", "render"]
    timing: Timing | None = None


class Tui(EventEmitter[TuiEvent, Any]):
    """Orchestrates components, a canvas and the process lifecycle.

    Emits ``"update"`` after components were drawn, ``"render"`` with the
    frame's :class:`Timing`, ``"close"`` once when shutting down, and
    ``"add_component"`` / ``"remove_component"`` with the component.
    An input decoder may emit ``"key_press"`` with a :class:`KeyPress`.
    """

    def __init__(
        self,
        canvas: Canvas,
        style: Mapping[str, Any] | None = None,
        update_rate: float | None = None,
        signals: SignalSource | None = None,
        exit_on_close: bool = True,
    ) -> None:
        super().__init__()

        self.canvas = canvas
        self.style: dict[str, Any] = compile_styler(style) if style else {}
        self.update_rate: float = (
            update_rate if update_rate is not None else canvas.refresh_rate
        )
        self.components: list[Component] = []
        self.exit_on_close = exit_on_close
        self._closed = False

        if signals is not None:
            signals.on_interrupt(self.close)
            signals.on_exit(self._close_at_exit)

        # Raw-mode terminals and platforms without SIGINT deliver ctrl+c
        # as a key press
        if signals is None or not signals.supports_interrupt:
            self.on("key_press", self._on_key_press)

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def add_component(self, component: Component) -> None:
        """Register *component*, keeping the list ordered by ``z_index``."""
        bisect.insort(self.components, component, key=lambda c: c.z_index)
        self.emit("add_component", component)

    def remove_component(self, component: Component) -> None:
        try:
            self.components.remove(component)
        except ValueError:
            return
        self.emit("remove_component", component)

    # ------------------------------------------------------------------
    # Cadences
    # ------------------------------------------------------------------

    async def updates(self) -> AsyncIterator[Tick]:
        """Tick every ``update_rate`` milliseconds.

        Half of the time a tick took to handle is taken off the next wait.
        """
        while True:
            start = time.perf_counter()
            yield Tick("update")
            elapsed = (time.perf_counter() - start) * 1000
            await asyncio.sleep(max(0.0, self.update_rate - elapsed / 2) / 1000)

    async def renders(self) -> AsyncIterator[Tick]:
        async for timing in self.canvas.frames():
            yield Tick("render", timing)

    async def run(self) -> AsyncIterator[Tick]:
        """Drive both cadences until :meth:`close` is called."""
        stream = combine(self.updates(), self.renders())
        try:
            async for tick in stream:
                if self._closed:
                    break

                if tick.type == "update":
                    self.draw()
                    self.emit("update")
                else:
                    self.emit("render", tick.timing)

                yield tick

                if self._closed:
                    break
        finally:
            await stream.aclose()

    def draw(self) -> None:
        """Clear the screen to the background style and draw every component."""
        rows, columns = self.canvas.size
        self.canvas.draw_rectangle(0, 0, columns, rows, " ", self.style or None)

        for component in self.components:
            component.draw()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def close(self, exit_process: bool | None = None) -> None:
        """Restore the cursor, emit ``"close"`` and stop the loop.

        Unless disabled, the process then exits with status 0.
        """
        if self._closed:
            return
        self._closed = True
        logger.info("Closing")

        self.canvas.writer.write(SHOW_CURSOR)
        self.emit("close")

        if exit_process is None:
            exit_process = self.exit_on_close
        if not exit_process:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            sys.exit(0)
        loop.call_soon(sys.exit, 0)

    def _close_at_exit(self) -> None:
        self.close(exit_process=False)

    def _on_key_press(self, key_press: KeyPress) -> None:
        if key_press.ctrl and key_press.key == "c":
            self.close()


def create_tui(
    config: TuiConfig | None = None,
    terminal: ProcessTerminal | None = None,
    signals: SignalSource | None = None,
    style: Mapping[str, Any] | None = None,
) -> Tui:
    """Build a terminal-backed :class:`Tui` from *config*.

    Configuration defaults to :meth:`TuiConfig.from_env`, the terminal to
    stdout and the signals to the current process's.
    """
    if config is None:
        config = TuiConfig.from_env()
    if terminal is None:
        terminal = ProcessTerminal(write_log=config.write_log)
    if signals is None:
        signals = ProcessSignals()

    canvas = Canvas(
        terminal,
        size=terminal.size,
        filler=config.filler,
        smart_render=config.smart_render,
        refresh_rate=config.refresh_rate,
        signals=signals,
    )
    return Tui(canvas, style=style, update_rate=config.update_rate, signals=signals)
