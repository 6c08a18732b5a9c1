"""Merge several async iterators into one stream ordered by readiness.

Each source is pulled by its own producer task which pushes into a shared
:class:`asyncio.Queue`.  A producer does not pull its next item until the
consumer has finished with the previous one, so time measured inside a
source covers the consumer's handling of its item.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any, TypeVar

T = TypeVar("T")

_DONE = object()


class _Failure:
    __slots__ = ("exc",)

    def __init__(self, exc: BaseException) -> None:
        self.exc = exc


async def _produce(
    source: AsyncIterator[Any],
    queue: asyncio.Queue[tuple[Any, asyncio.Event | None]],
) -> None:
    try:
        async for item in source:
            consumed = asyncio.Event()
            await queue.put((item, consumed))
            await consumed.wait()
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        await queue.put((_Failure(exc), None))
        return
    await queue.put((_DONE, None))


async def combine(*sources: AsyncIterator[T]) -> AsyncIterator[T]:
    """Yield items from every source as soon as each becomes available."""
    queue: asyncio.Queue[tuple[Any, asyncio.Event | None]] = asyncio.Queue()
    producers = [asyncio.create_task(_produce(s, queue)) for s in sources]
    remaining = len(producers)

    try:
        while remaining:
            item, consumed = await queue.get()
            if item is _DONE:
                remaining -= 1
                continue
            if isinstance(item, _Failure):
                raise item.exc
            try:
                yield item
            finally:
                if consumed is not None:
                    consumed.set()
    finally:
        for task in producers:
            task.cancel()
        await asyncio.gather(*producers, return_exceptions=True)
        for source in sources:
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                await aclose()
