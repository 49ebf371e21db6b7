"""Per-owner mutation serialization."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class OwnerLocks:
    """Registry of one ``asyncio.Lock`` per scope key.

    Structural mutations on an owner's columns or item scopes rewrite
    several rows in sequence; holding the owner's lock for the whole
    sequence keeps the dense ordering intact. Unrelated owners never
    contend.

    A key's lock lives only while somebody holds or waits for it, so the
    registry stays as small as the number of owners currently writing.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def active_keys(self) -> list[Hashable]:
        """Keys currently held or waited on."""
        return list(self._locks)
