"""Priority- and once-aware publish/subscribe registry.

Listeners never run inside :meth:`EventEmitter.emit`.  Each matching
listener is queued on the running event loop as its own callback, highest
priority first, and a listener that raises is logged without affecting the
others.  With no loop running (at interpreter exit, say) the listeners run
in that order before ``emit`` returns.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")
T = TypeVar("T")

WILDCARD = "*"

# Strong references to running listener tasks
_pending: set[asyncio.Future[Any]] = set()

ListenerFunction = Callable[..., Any]


@dataclass
class Listener(Generic[E, T]):
    """A callback registered for one event."""

    event: E
    func: Callable[..., Any]
    priority: int = 0
    once: bool = False


class EventEmitter(Generic[E, T]):
    """Registry of listeners keyed by event tag.

    Parameters
    ----------
    purge_all_once:
        When ``True`` (the default) every emission removes *all* once
        listeners, whichever event they were registered for.  When
        ``False`` only the once listeners that matched the emitted event
        are removed.
    """

    def __init__(self, purge_all_once: bool = True) -> None:
        self._listeners: list[Listener[E, T]] = []
        self._purge_all_once = purge_all_once

    @property
    def listeners(self) -> list[Listener[E, T]]:
        return list(self._listeners)

    # -- subscription -------------------------------------------------------

    def on(
        self,
        event: E,
        func: ListenerFunction,
        priority: int = 0,
        once: bool = False,
    ) -> None:
        self._listeners.append(Listener(event, func, priority, once))

    def once(self, event: E, func: ListenerFunction, priority: int = 0) -> None:
        self.on(event, func, priority, True)

    def off(self, event: E | str, func: ListenerFunction | None = None) -> None:
        """Remove listeners for *event*, or for every event if it is ``"*"``.

        With *func* only the listeners registered with that exact callback
        are removed.
        """

        def matches(listener: Listener[E, T]) -> bool:
            if event != WILDCARD and listener.event != event:
                return False
            return func is None or listener.func is func

        self._listeners = [x for x in self._listeners if not matches(x)]

    # -- emission -----------------------------------------------------------

    def emit(self, event: E, *data: T) -> None:
        matching = sorted(
            (x for x in self._listeners if x.event == event),
            key=lambda x: x.priority,
            reverse=True,
        )

        # Once-listeners leave before any listener runs
        if self._purge_all_once:
            self._listeners = [x for x in self._listeners if not x.once]
        else:
            fired = {id(x) for x in matching if x.once}
            self._listeners = [x for x in self._listeners if id(x) not in fired]

        try:
            loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for listener in matching:
            if loop is not None:
                loop.call_soon(self._invoke, listener, data)
            else:
                self._invoke(listener, data)

    @staticmethod
    def _invoke(listener: Listener[E, T], data: tuple[Any, ...]) -> None:
        try:
            result = listener.func(*data)
        except Exception:
            logger.exception("Listener for %r failed", listener.event)
            return

        if not inspect.iscoroutine(result):
            return

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Emitted outside the loop (e.g. at interpreter exit)
            try:
                asyncio.run(result)
            except Exception:
                logger.exception("Listener for %r failed", listener.event)
            return

        task = asyncio.ensure_future(result)
        _pending.add(task)
        task.add_done_callback(_pending.discard)
        task.add_done_callback(
            lambda t, event=listener.event: _report_task_failure(t, event)
        )


def _report_task_failure(task: asyncio.Future[Any], event: object) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Listener for %r failed", event, exc_info=exc)
