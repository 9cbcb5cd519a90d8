"""In-process per-series locks."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from app.services.numbering.exceptions import SeriesLockTimeout


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SeriesLocks:
    """Registry of asyncio locks keyed by series key.

    Serializes allocations for one series within this process while leaving
    other series untouched. Entries are dropped once no task holds or waits
    on them, so the registry never outgrows the set of active series.

    Usage:
        async with series_locks.hold("WO-2024-06", timeout=10):
            ...  # read max, insert, commit
    """

    def __init__(self) -> None:
        self._entries: dict[str, _LockEntry] = {}

    def __contains__(self, series_key: str) -> bool:
        return series_key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @asynccontextmanager
    async def hold(self, series_key: str, timeout: float | None = None) -> AsyncIterator[None]:
        """Hold the lock for ``series_key``.

        Raises:
            SeriesLockTimeout: lock not acquired within ``timeout`` seconds
        """
        entry = self._entries.get(series_key)
        if entry is None:
            entry = self._entries[series_key] = _LockEntry()
        entry.users += 1
        try:
            try:
                async with asyncio.timeout(timeout):
                    await entry.lock.acquire()
            except TimeoutError as e:
                raise SeriesLockTimeout(series_key, timeout) from e
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[series_key]


# Shared by every allocator in this process
series_locks = SeriesLocks()
