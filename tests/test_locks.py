from __future__ import annotations

import asyncio

import pytest

from app.registration.locks import UserLocks


class TestUserLocks:
    @pytest.mark.asyncio
    async def test_same_user_serialised(self):
        locks = UserLocks()
        events: list[str] = []

        async def worker(name: str):
            async with locks.hold("u1"):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))
        assert events == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_different_users_overlap(self):
        locks = UserLocks()
        inside = asyncio.Event()
        both = asyncio.Event()

        async def first():
            async with locks.hold("u1"):
                inside.set()
                await asyncio.wait_for(both.wait(), timeout=1)

        async def second():
            await inside.wait()
            async with locks.hold("u2"):
                both.set()

        await asyncio.gather(first(), second())
        assert both.is_set()

    @pytest.mark.asyncio
    async def test_entries_released(self):
        locks = UserLocks()
        async with locks.hold("u1"):
            assert locks.active() == 1
        assert locks.active() == 0

    @pytest.mark.asyncio
    async def test_released_on_error(self):
        locks = UserLocks()
        with pytest.raises(RuntimeError):
            async with locks.hold("u1"):
                raise RuntimeError("boom")
        assert locks.active() == 0
        async with locks.hold("u1"):
            pass
