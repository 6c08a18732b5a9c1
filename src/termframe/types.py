"""Shared data types and collaborator protocols."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, NamedTuple, Protocol


class ConsoleSize(NamedTuple):
    rows: int
    columns: int


# ---------------------------------------------------------------------------
# Size providers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FixedSize:
    """A size that never changes."""

    size: ConsoleSize

    def get(self) -> ConsoleSize:
        return self.size


@dataclass(frozen=True)
class QueriedSize:
    """A size asked from *query* every time it is needed."""

    query: Callable[[], ConsoleSize]

    def get(self) -> ConsoleSize:
        rows, columns = self.query()
        return ConsoleSize(rows, columns)


SizeProvider = FixedSize | QueriedSize


def as_size_provider(
    value: SizeProvider | ConsoleSize | tuple[int, int] | Callable[[], ConsoleSize],
) -> SizeProvider:
    """Wrap a fixed size or a zero-argument query into a ``SizeProvider``."""
    if isinstance(value, (FixedSize, QueriedSize)):
        return value
    if callable(value):
        return QueriedSize(value)
    rows, columns = value
    return FixedSize(ConsoleSize(rows, columns))


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class Writer(Protocol):
    """Synchronous byte sink (stdout, a pty, a test buffer)."""

    def write(self, data: str) -> None: ...


class Component(Protocol):
    """Anything the loop can draw.

    ``draw`` is called once per update tick; components with a lower
    ``z_index`` are drawn first.
    """

    z_index: int | float

    def draw(self) -> None: ...


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Timing:
    """Metrics of one rendered frame, in milliseconds."""

    fps: float
    delta_time: float
    last_time: float


@dataclass(frozen=True)
class KeyPress:
    """A decoded key press, as emitted by an input decoder."""

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
