"""Tests for the update/render loop: components, cadences and the close path."""

from __future__ import annotations

import asyncio

import pytest

from termframe.canvas import SHOW_CURSOR, Canvas
from termframe.config import TuiConfig
from termframe.tui import Tick, Tui, create_tui
from termframe.types import KeyPress, Timing

from .virtual_terminal import FakeSignals, VirtualTerminal


class Recorder:
    """A component that records when it was drawn."""

    def __init__(self, name: str, z_index: float, log: list[str]) -> None:
        self.name = name
        self.z_index = z_index
        self._log = log

    def draw(self) -> None:
        self._log.append(self.name)


class Label:
    """A component that draws text on a canvas."""

    def __init__(self, canvas: Canvas, text: str, z_index: int = 0) -> None:
        self.canvas = canvas
        self.text = text
        self.z_index = z_index

    def draw(self) -> None:
        self.canvas.draw_text(0, 0, self.text)


def make_tui(
    rows: int = 1, columns: int = 4, **kwargs
) -> tuple[Tui, Canvas, VirtualTerminal]:
    term = VirtualTerminal(rows=rows, columns=columns)
    canvas = Canvas(term, filler=".", refresh_rate=kwargs.pop("refresh_rate", 16))
    kwargs.setdefault("exit_on_close", False)
    return Tui(canvas, **kwargs), canvas, term


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


class TestComponents:
    def test_kept_in_ascending_z_order(self) -> None:
        tui, _, _ = make_tui()
        log: list[str] = []
        top = Recorder("top", 10, log)
        bottom = Recorder("bottom", -1, log)
        middle = Recorder("middle", 5, log)
        for component in (top, bottom, middle):
            tui.add_component(component)
        assert tui.components == [bottom, middle, top]

    def test_equal_z_index_keeps_insertion_order(self) -> None:
        tui, _, _ = make_tui()
        log: list[str] = []
        first = Recorder("first", 1, log)
        second = Recorder("second", 1, log)
        tui.add_component(first)
        tui.add_component(second)
        assert tui.components == [first, second]

    def test_add_and_remove_emit_events(self) -> None:
        tui, _, _ = make_tui()
        events: list[tuple[str, object]] = []
        tui.on("add_component", lambda c: events.append(("add", c)))
        tui.on("remove_component", lambda c: events.append(("remove", c)))
        component = Recorder("c", 0, [])
        tui.add_component(component)
        tui.remove_component(component)
        assert events == [("add", component), ("remove", component)]
        assert tui.components == []

    def test_removing_unknown_component_is_silent(self) -> None:
        tui, _, _ = make_tui()
        removed: list[object] = []
        tui.on("remove_component", removed.append)
        tui.remove_component(Recorder("c", 0, []))
        assert removed == []


# ---------------------------------------------------------------------------
# Update tick
# ---------------------------------------------------------------------------


class TestDraw:
    def test_draws_components_ascending(self) -> None:
        tui, _, _ = make_tui()
        log: list[str] = []
        tui.add_component(Recorder("b", 2, log))
        tui.add_component(Recorder("a", 1, log))
        tui.draw()
        assert log == ["a", "b"]

    def test_clears_to_background_style_before_drawing(self) -> None:
        tui, canvas, _ = make_tui(style={"background": "blue"})
        tui.add_component(Label(canvas, "hi"))
        tui.draw()
        blank = "\x1b[44m \x1b[0m"
        assert canvas.frame_buffer == [[["h", "i"], [blank, blank]]]

    def test_clears_with_plain_spaces_without_style(self) -> None:
        tui, canvas, _ = make_tui()
        canvas.draw_text(0, 0, "abcd")
        tui.draw()
        assert canvas.frame_buffer == [[[" ", " "], [" ", " "]]]

    def test_update_rate_defaults_to_refresh_rate(self) -> None:
        tui, _, _ = make_tui(refresh_rate=33)
        assert tui.update_rate == 33

    def test_explicit_update_rate(self) -> None:
        tui, _, _ = make_tui(update_rate=100)
        assert tui.update_rate == 100


# ---------------------------------------------------------------------------
# Run loop
# ---------------------------------------------------------------------------


class TestRun:
    @pytest.mark.asyncio
    async def test_merges_update_and_render_ticks_until_close(self) -> None:
        tui, canvas, term = make_tui(refresh_rate=1, update_rate=1)
        log: list[str] = []
        tui.add_component(Recorder("c", 0, log))
        updates: list[str] = []
        renders: list[Timing] = []
        tui.on("update", lambda: updates.append("update"))
        tui.on("render", renders.append)

        seen: set[str] = set()

        async def drive() -> list[Tick]:
            ticks: list[Tick] = []
            async for tick in tui.run():
                ticks.append(tick)
                seen.add(tick.type)
                if seen == {"update", "render"}:
                    tui.close()
            return ticks

        ticks = await asyncio.wait_for(drive(), timeout=5)
        await asyncio.sleep(0.01)

        assert {t.type for t in ticks} == {"update", "render"}
        assert all(isinstance(t.timing, Timing) for t in ticks if t.type == "render")
        assert log
        assert updates
        assert renders
        assert term.output.endswith(SHOW_CURSOR)

    @pytest.mark.asyncio
    async def test_update_cadence_yields_update_ticks(self) -> None:
        tui, _, _ = make_tui(update_rate=1)
        updates = tui.updates()
        first = await updates.__anext__()
        second = await updates.__anext__()
        await updates.aclose()
        assert first == second == Tick("update")


# ---------------------------------------------------------------------------
# Close path
# ---------------------------------------------------------------------------


class TestClose:
    def test_close_shows_cursor_and_emits(self) -> None:
        tui, _, term = make_tui()
        closed: list[str] = []
        tui.on("close", lambda: closed.append("close"))
        tui.close()
        assert tui.closed is True
        assert term.output == SHOW_CURSOR
        assert closed == ["close"]

    def test_close_is_idempotent(self) -> None:
        tui, _, term = make_tui()
        tui.close()
        tui.close()
        assert term.output == SHOW_CURSOR

    def test_close_exits_process(self) -> None:
        tui, _, _ = make_tui(exit_on_close=True)
        with pytest.raises(SystemExit) as info:
            tui.close()
        assert info.value.code == 0

    def test_interrupt_closes(self) -> None:
        signals = FakeSignals()
        tui, _, _ = make_tui(signals=signals)
        signals.fire_interrupt()
        assert tui.closed is True

    def test_process_exit_closes_without_exiting(self) -> None:
        signals = FakeSignals()
        tui, _, term = make_tui(signals=signals, exit_on_close=True)
        signals.fire_exit()
        assert tui.closed is True
        assert term.output == SHOW_CURSOR

    def test_ctrl_c_closes_without_interrupt_signal(self) -> None:
        signals = FakeSignals(supports_interrupt=False)
        tui, _, _ = make_tui(signals=signals)
        tui.emit("key_press", KeyPress("c", ctrl=True))
        assert tui.closed is True

    def test_other_keys_do_not_close(self) -> None:
        signals = FakeSignals(supports_interrupt=False)
        tui, _, _ = make_tui(signals=signals)
        tui.emit("key_press", KeyPress("c"))
        tui.emit("key_press", KeyPress("d", ctrl=True))
        assert tui.closed is False

    def test_ctrl_c_ignored_when_interrupt_is_delivered(self) -> None:
        signals = FakeSignals(supports_interrupt=True)
        tui, _, _ = make_tui(signals=signals)
        tui.emit("key_press", KeyPress("c", ctrl=True))
        assert tui.closed is False


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestCreateTui:
    def test_builds_from_config(self) -> None:
        term = VirtualTerminal(rows=3, columns=6)
        signals = FakeSignals()
        config = TuiConfig(refresh_rate=5, update_rate=10, smart_render=False, filler="~")
        tui = create_tui(config, terminal=term, signals=signals)  # type: ignore[arg-type]
        assert tui.update_rate == 10
        assert tui.canvas.refresh_rate == 5
        assert tui.canvas.smart_render is False
        assert tui.canvas.frame_buffer[0][0] == ["~", "~"]
        assert len(signals.resize_handlers) == 1
        assert len(signals.interrupt_handlers) == 1
        assert len(signals.exit_handlers) == 2
