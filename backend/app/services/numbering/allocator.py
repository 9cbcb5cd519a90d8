"""Sequential identifier allocation.

The current maximum of a series is derived from the identifiers already
stored, so reading the maximum and inserting the next record must happen
under one lock. ``allocate_and_persist`` holds an in-process lock and the
store's series lock across both steps, and retries when another process
still wins the race (unique constraint violation).
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import settings
from app.services.numbering.exceptions import AllocationConflict, MalformedIdentifier
from app.services.numbering.locks import SeriesLocks, series_locks
from app.services.numbering.series import Identifier, SeriesKey
from app.services.numbering.store import RecordStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class AllocationRetryConfig:
    """Retry policy for identifier conflicts."""

    max_attempts: int = 5
    min_wait: float = 0.05
    max_wait: float = 1.0
    multiplier: float = 0.05

    @classmethod
    def from_settings(cls) -> "AllocationRetryConfig":
        return cls(
            max_attempts=settings.numbering_max_attempts,
            min_wait=settings.numbering_retry_min_wait,
            max_wait=settings.numbering_retry_max_wait,
            multiplier=settings.numbering_retry_multiplier,
        )


def _log_conflict_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Identifier conflict, retrying allocation",
        attempt=retry_state.attempt_number,
        identifier=getattr(exc, "identifier", None),
    )


class SequenceAllocator:
    """Allocates ``PREFIX-BUCKET-NNNN`` identifiers from a record store.

    Usage:
        allocator = SequenceAllocator(store)

        async def persist(identifier: Identifier) -> WorkOrder:
            return await store.reserve_or_insert(WorkOrder(order_number=str(identifier), ...))

        work_order = await allocator.allocate_and_persist("WO", "2024-06", persist)
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        locks: SeriesLocks | None = None,
        retry: AllocationRetryConfig | None = None,
        lock_timeout: float | None = None,
    ):
        self.store = store
        self.locks = locks if locks is not None else series_locks
        self.retry = retry or AllocationRetryConfig.from_settings()
        self.lock_timeout = settings.numbering_lock_timeout if lock_timeout is None else lock_timeout

    async def allocate(self, prefix: str, bucket: str) -> Identifier:
        """Compute the next identifier of a series from the stored maximum.

        Takes no lock and writes nothing; two concurrent calls can return the
        same identifier. Use allocate_and_persist when creating records.

        Raises:
            InvalidSeriesKey: bad prefix/bucket (before any store access)
            MalformedIdentifier: stored maximum cannot be parsed
            StoreUnavailable: store read failed
        """
        series = SeriesKey.parse(prefix, bucket)
        current_max = await self.store.find_max_identifier(series.scan_pattern)
        if current_max is None:
            return Identifier(series=series, sequence=1)

        latest = Identifier.parse(current_max)
        if latest.series != series:
            raise MalformedIdentifier(f"Store returned {current_max!r} for series {series}")
        return Identifier(series=series, sequence=latest.sequence + 1)

    async def allocate_and_persist(
        self,
        prefix: str,
        bucket: str,
        persist: Callable[[Identifier], Awaitable[T]],
    ) -> T:
        """Allocate the next identifier and persist a record carrying it.

        ``persist`` runs while the series is locked and must raise
        AllocationConflict when the identifier is already taken; the whole
        allocation is then retried with backoff.

        Raises:
            InvalidSeriesKey: bad prefix/bucket
            AllocationConflict: still conflicting after the last attempt
            StoreUnavailable: store failure or series lock timeout
        """
        series = SeriesKey.parse(prefix, bucket)
        series_key = str(series)

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(AllocationConflict),
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential(
                multiplier=self.retry.multiplier,
                min=self.retry.min_wait,
                max=self.retry.max_wait,
            ),
            before_sleep=_log_conflict_retry,
            reraise=True,
        )

        result: T | None = None
        identifier: Identifier | None = None
        async for attempt in retrying:
            with attempt:
                async with self.locks.hold(series_key, timeout=self.lock_timeout):
                    async with self.store.series_lock(series_key):
                        identifier = await self.allocate(series.prefix, series.bucket)
                        result = await persist(identifier)

        # AsyncRetrying either succeeded or re-raised the last error
        assert identifier is not None
        logger.info("Allocated identifier", identifier=str(identifier), series=series_key)
        return result  # type: ignore[return-value]
