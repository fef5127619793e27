"""Per-container serialization of lifecycle operations."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class ContainerLocks:
    """
    One asyncio.Lock per container identifier.

    Entries are created on demand and dropped once nobody holds or waits on
    them, so the table only ever holds identifiers with work in flight.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}

    @asynccontextmanager
    async def hold(self, identifier: str) -> AsyncIterator[None]:
        entry = self._entries.get(identifier)
        if entry is None:
            entry = self._entries[identifier] = _Entry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(identifier, None)

    def active(self) -> int:
        return len(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries
