"""Unit tests for the asyncio reader/writer lock."""
from __future__ import annotations

import asyncio

import pytest

from alertbridge.utils.locks import ReadWriteLock


@pytest.mark.unit
async def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    async with lock.read():
        async with lock.read():
            assert lock.readers == 2
    assert lock.readers == 0


@pytest.mark.unit
async def test_writer_waits_for_readers() -> None:
    lock = ReadWriteLock()
    order: list[str] = []
    reader_entered = asyncio.Event()
    release_reader = asyncio.Event()

    async def reader() -> None:
        async with lock.read():
            reader_entered.set()
            await release_reader.wait()
            order.append("reader_done")

    async def writer() -> None:
        await reader_entered.wait()
        async with lock.write():
            order.append("writer")

    reader_task = asyncio.create_task(reader())
    writer_task = asyncio.create_task(writer())
    await reader_entered.wait()
    await asyncio.sleep(0)
    assert order == []

    release_reader.set()
    await asyncio.gather(reader_task, writer_task)
    assert order == ["reader_done", "writer"]


@pytest.mark.unit
async def test_readers_wait_for_writer() -> None:
    lock = ReadWriteLock()
    order: list[str] = []

    async with lock.write():
        task = asyncio.create_task(_read_into(lock, order))
        await asyncio.sleep(0)
        assert lock.writing is True
        assert order == []

    await task
    assert order == ["read"]


async def _read_into(lock: ReadWriteLock, order: list[str]) -> None:
    async with lock.read():
        order.append("read")
