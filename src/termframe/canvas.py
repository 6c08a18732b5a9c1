"""Frame buffer and differential renderer.

The screen is stored as a ``rows x ceil(columns / 2)`` grid of *slots*.  A
slot is a two-element list holding the (possibly styled) strings of two
adjacent terminal columns, so column ``c`` lives in slot ``c // 2`` at half
``c % 2``.  A full-width glyph covers the column after it, whose half is
set to ``""``.

After each render a structural copy of the grid is kept as the snapshot;
the next render compares slots against it and rewrites only the ones that
changed.  Without a snapshot (first frame, after a resize, smart rendering
off) the whole grid is written.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Mapping
from typing import Any, Callable, Literal

from termframe.event_emitter import EventEmitter
from termframe.signals import SignalSource
from termframe.styler import compile_styler, style_string_from_styler
from termframe.types import (
    ConsoleSize,
    SizeProvider,
    Timing,
    Writer,
    as_size_provider,
)
from termframe.utils import characters, is_full_width, remove_style_codes

logger = logging.getLogger(__name__)

__all__ = [
    "HIDE_CURSOR",
    "SHOW_CURSOR",
    "Canvas",
    "CanvasEvent",
    "FrameBuffer",
    "copy_buffer",
    "move_cursor",
]

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"

# Delay before the one-shot refresh that repaints clipped wide glyphs
_REFRESH_DELAY = 0.001

CanvasEvent = Literal["render", "resize"]

FrameBuffer = list[list[list[str]]]


def move_cursor(row: int, column: int) -> str:
    """Escape code moving the cursor to 1-indexed *row*, *column*."""
    return f"\x1b[{row};{column}H"


def copy_buffer(buffer: FrameBuffer) -> FrameBuffer:
    """Return an independent copy of *buffer*, slot by slot."""
    return [[[slot[0], slot[1]] for slot in row] for row in buffer]


def _now() -> float:
    return time.perf_counter() * 1000


def _slot_count(columns: int) -> int:
    return (columns + 1) // 2


class Canvas(EventEmitter[CanvasEvent, Any]):
    """Draws on, and renders, one terminal screen.

    Parameters
    ----------
    writer:
        Sink that receives every escape sequence and frame.
    size:
        A fixed ``ConsoleSize`` or a callable returning the current one.
        Defaults to ``writer.size``.
    filler:
        Character used for cells nothing has been drawn on.
    smart_render:
        Only rewrite the slots that changed since the previous frame.
    refresh_rate:
        Milliseconds between frames produced by :meth:`frames`.
    signals:
        Where to register for window-resize and exit notifications.

    Emits ``"render"`` with a :class:`Timing` after each frame and
    ``"resize"`` with the new :class:`ConsoleSize`.
    """

    def __init__(
        self,
        writer: Writer,
        size: SizeProvider | ConsoleSize | Callable[[], ConsoleSize] | None = None,
        filler: str = " ",
        smart_render: bool = True,
        refresh_rate: float = 16,
        signals: SignalSource | None = None,
    ) -> None:
        super().__init__()

        if size is None:
            query = getattr(writer, "size", None)
            if query is None:
                raise TypeError("size is required when the writer cannot report one")
            size = query

        self.writer = writer
        self.size_provider: SizeProvider = as_size_provider(size)
        self.filler = filler
        self.smart_render = smart_render
        self.refresh_rate = refresh_rate

        self.frame_buffer: FrameBuffer = []
        self.prev_buffer: FrameBuffer | None = None

        # Metrics
        self.fps: float = 0.0
        self.last_time: float = _now()
        self.delta_time: float = 16.0

        # One-shot fix for wide glyphs cut off at the edges of the first
        # incremental frames
        self.refreshed: bool = False
        self._refresh_scheduled: bool = False

        # Resize notifications arriving mid-render wait for the frame to end
        self._rendering: bool = False
        self._resize_pending: bool = False

        self.fill_buffer()

        if signals is not None:
            signals.on_resize(self.resize)
            signals.on_exit(self.show_cursor)

    # ------------------------------------------------------------------
    # Size
    # ------------------------------------------------------------------

    @property
    def size(self) -> ConsoleSize:
        """Current size, asked from the size provider on every access."""
        return self.size_provider.get()

    def _matches(self, buffer: FrameBuffer, size: ConsoleSize) -> bool:
        slots = _slot_count(size.columns)
        return len(buffer) == size.rows and all(len(row) == slots for row in buffer)

    # ------------------------------------------------------------------
    # Buffer management
    # ------------------------------------------------------------------

    def fill_buffer(self) -> None:
        """Fill every empty slot of the frame buffer with the filler.

        Slots that already hold something are left alone; rows and slots
        beyond the current size are dropped.
        """
        filler_wide = is_full_width(remove_style_codes(self.filler))
        rows, columns = self.size
        slots = _slot_count(columns)

        del self.frame_buffer[rows:]
        for r in range(rows):
            if r == len(self.frame_buffer):
                self.frame_buffer.append([])
            row = self.frame_buffer[r]
            del row[slots:]
            while len(row) < slots:
                row.append([self.filler, "" if filler_wide else self.filler])

    def invalidate(self) -> None:
        """Forget the snapshot so the next render rewrites everything."""
        self.prev_buffer = None

    def resize(self) -> None:
        """Adapt the buffer to the current size and repaint the screen."""
        if self._rendering:
            logger.debug("Resize during render; deferring until the frame is written")
            self._resize_pending = True
            return

        size = self.size
        logger.debug("Resizing canvas to %dx%d", size.columns, size.rows)
        self.fill_buffer()
        self.invalidate()
        self.render_full()
        self.emit("resize", size)

    def show_cursor(self) -> None:
        """Make the terminal cursor visible again."""
        self.writer.write(SHOW_CURSOR)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    @staticmethod
    def _slot_text(slot: list[str], index: int, columns: int) -> str:
        # With an odd column count the last slot has a single visible half
        if index * 2 + 1 >= columns:
            return slot[0]
        return slot[0] + slot[1]

    def render_changes(self) -> None:
        """Write only the slots that differ from the snapshot."""
        prev = self.prev_buffer
        if not prev:
            return

        size = self.size
        if not self._matches(prev, size) or not self._matches(self.frame_buffer, size):
            return

        out: list[str] = []
        for r, row in enumerate(self.frame_buffer):
            prev_row = prev[r]
            for c, slot in enumerate(row):
                if slot == prev_row[c]:
                    continue
                if slot[0] == "":
                    # Left half is covered by a wide glyph from the slot before
                    if c * 2 + 1 < size.columns:
                        out.append(move_cursor(r + 1, c * 2 + 2))
                        out.append(slot[1])
                else:
                    out.append(move_cursor(r + 1, c * 2 + 1))
                    out.append(self._slot_text(slot, c, size.columns))

        if out:
            self.writer.write("".join(out))

    def render_full(self) -> None:
        """Write the whole frame buffer, starting at the top-left corner."""
        columns = self.size.columns
        rows = len(self.frame_buffer)

        out: list[str] = [move_cursor(1, 1)]
        for r, row in enumerate(self.frame_buffer):
            out.append("\r")
            for c, slot in enumerate(row):
                out.append(self._slot_text(slot, c, columns))
            if r < rows - 1:
                out.append("\n")

        self.writer.write("".join(out))

    def render(self) -> Timing:
        """Render one frame and update the timing metrics.

        A resize notified while the frame is being written is held back
        and applied once the frame is complete.
        """
        start = _now()
        self._rendering = True
        try:
            self.writer.write(HIDE_CURSOR)

            if not self._matches(self.frame_buffer, self.size):
                # Size changed without a resize notification
                self.fill_buffer()
                self.invalidate()

            incremental = self.smart_render and self.prev_buffer is not None
            if incremental:
                self.render_changes()
            else:
                logger.debug("Full render")
                self.render_full()

            self.prev_buffer = copy_buffer(self.frame_buffer)
        finally:
            self._rendering = False

        if self._resize_pending:
            self._resize_pending = False
            self.resize()

        if incremental and not self.refreshed and not self._refresh_scheduled:
            self._schedule_refresh()

        end = _now()
        elapsed = start - self.last_time
        self.fps = 1000 / elapsed if elapsed > 0 else 0.0
        self.last_time = start
        self.delta_time = end - start

        timing = Timing(fps=self.fps, delta_time=self.delta_time, last_time=self.last_time)
        self.emit("render", timing)
        return timing

    def _schedule_refresh(self) -> None:
        self._refresh_scheduled = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._refresh()
            return
        loop.call_later(_REFRESH_DELAY, self._refresh)

    def _refresh(self) -> None:
        logger.debug("Refreshing canvas after first incremental render")
        self.fill_buffer()
        self.invalidate()
        self.refreshed = True

    async def frames(self) -> AsyncIterator[Timing]:
        """Render every ``refresh_rate`` milliseconds, yielding each frame's timing."""
        while True:
            yield self.render()
            await asyncio.sleep(self.refresh_rate / 1000)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw_pixel(
        self,
        column: int,
        row: int,
        value: str,
        styler: Mapping[str, Any] | None = None,
    ) -> None:
        """Set the character at *column*, *row*.

        Coordinates outside the buffer are ignored.
        """
        compiled = compile_styler(styler) if styler else None
        self._put(column, row, value, compiled)

    def _put(
        self,
        column: int,
        row: int,
        value: str,
        compiled: Mapping[str, Any] | None,
    ) -> None:
        if row < 0 or column < 0 or row >= len(self.frame_buffer):
            return
        slots = self.frame_buffer[row]
        index = column // 2
        half = column % 2
        if index >= len(slots):
            return

        full_width = is_full_width(value)

        if compiled is not None:
            value = style_string_from_styler(value, compiled)

        if full_width:
            if half == 1:
                if index + 1 < len(slots):
                    slots[index + 1][0] = ""
            else:
                slots[index][1] = ""

        slots[index][half] = value

    def draw_rectangle(
        self,
        column: int,
        row: int,
        width: int,
        height: int,
        value: str = " ",
        styler: Mapping[str, Any] | None = None,
    ) -> None:
        """Fill a *width* x *height* rectangle with *value*."""
        compiled = compile_styler(styler) if styler else None
        for r in range(row, row + height):
            for c in range(column, column + width):
                self._put(c, r, value, compiled)

    def draw_text(
        self,
        column: int,
        row: int,
        text: str,
        styler: Mapping[str, Any] | None = None,
    ) -> None:
        """Draw *text* starting at *column*, *row*; ``\\n`` starts a new row."""
        compiled = compile_styler(styler) if styler else None
        for line_no, line in enumerate(text.split("\n")):
            offset = 0
            for i, char in enumerate(characters(line)):
                self._put(column + i + offset, row + line_no, char, compiled)
                if is_full_width(char):
                    offset += 1
