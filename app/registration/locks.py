"""Per-user message serialisation.

A user's read → process → write cycle runs under that user's lock, so two
messages from one user cannot interleave and lose each other's fields.
Process-local: multiple workers still need a store-level guard.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class UserLocks:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._holders[user_id] = self._holders.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[user_id] -= 1
            if self._holders[user_id] == 0:
                # Nobody holds or waits: drop the entry so the map stays bounded
                del self._holders[user_id]
                del self._locks[user_id]

    def active(self) -> int:
        """Number of users with a held or awaited lock."""
        return len(self._locks)
