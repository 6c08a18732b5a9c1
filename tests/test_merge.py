"""Tests for merging async iterators into one readiness-ordered stream."""

from __future__ import annotations

import asyncio

import pytest

from termframe.merge import combine


async def ticker(name: str, delays: list[float]):
    for i, delay in enumerate(delays):
        await asyncio.sleep(delay)
        yield f"{name}{i}"


class TestCombine:
    @pytest.mark.asyncio
    async def test_items_arrive_in_readiness_order(self) -> None:
        fast = ticker("f", [0.001, 0.001, 0.001])
        slow = ticker("s", [0.05])
        items = [item async for item in combine(fast, slow)]
        assert items == ["f0", "f1", "f2", "s0"]

    @pytest.mark.asyncio
    async def test_ends_when_every_source_ends(self) -> None:
        items = [item async for item in combine(ticker("a", [0]), ticker("b", [0, 0]))]
        assert sorted(items) == ["a0", "b0", "b1"]

    @pytest.mark.asyncio
    async def test_source_waits_until_item_consumed(self) -> None:
        pulled: list[int] = []

        async def source():
            for i in range(3):
                pulled.append(i)
                yield i

        stream = combine(source())
        first = await stream.__anext__()
        await asyncio.sleep(0.01)
        assert first == 0
        assert pulled == [0]
        await stream.aclose()

    @pytest.mark.asyncio
    async def test_source_failure_reaches_consumer(self) -> None:
        async def broken():
            yield 1
            raise RuntimeError("source failed")

        with pytest.raises(RuntimeError, match="source failed"):
            async for _ in combine(broken()):
                pass

    @pytest.mark.asyncio
    async def test_closing_consumer_closes_sources(self) -> None:
        closed: list[str] = []

        async def endless(name: str):
            try:
                while True:
                    await asyncio.sleep(0.001)
                    yield name
            finally:
                closed.append(name)

        stream = combine(endless("a"), endless("b"))
        await stream.__anext__()
        await stream.aclose()
        assert sorted(closed) == ["a", "b"]
