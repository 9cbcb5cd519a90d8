"""In-memory RecordStore used by allocator tests."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.services.numbering import AllocationConflict, AllocationRetryConfig, StoreUnavailable

NO_WAIT_RETRY = AllocationRetryConfig(max_attempts=20, min_wait=0, max_wait=0, multiplier=0)


class InMemoryRecordStore:
    """Set of identifiers with a uniqueness check on insert.

    ``read_delay`` sleeps after the maximum has been computed, which widens
    the window in which concurrent callers see the same (stale) maximum.
    """

    def __init__(self, *, read_delay: float = 0.0, write_delay: float = 0.0):
        self.identifiers: set[str] = set()
        self.inserted: list[str] = []
        self.read_delay = read_delay
        self.write_delay = write_delay
        self.reads = 0
        self.conflicts = 0
        self.unavailable = False

    def add(self, *identifiers: str) -> None:
        self.identifiers.update(identifiers)

    @asynccontextmanager
    async def series_lock(self, series_key: str) -> AsyncIterator[None]:
        yield

    async def find_max_identifier(self, pattern: str) -> str | None:
        if self.unavailable:
            raise StoreUnavailable("store is down")
        self.reads += 1
        stem = pattern[:-1]
        matches = [i for i in self.identifiers if i.startswith(stem) and "-" not in i[len(stem) :]]
        await asyncio.sleep(self.read_delay)
        if not matches:
            return None
        return max(matches, key=lambda value: (len(value), value))

    async def reserve_or_insert(self, identifier: str) -> str:
        await asyncio.sleep(self.write_delay)
        if identifier in self.identifiers:
            self.conflicts += 1
            raise AllocationConflict(identifier)
        self.identifiers.add(identifier)
        self.inserted.append(identifier)
        return identifier
