"""Document numbering exceptions."""

from app.services.exceptions import ServiceError


class NumberingError(ServiceError):
    """Base numbering exception."""

    pass


class InvalidSeriesKey(NumberingError):
    """Prefix or bucket is outside the known vocabulary/format.

    Raised before any store access. Not retryable: the caller built a bad key.
    """

    pass


class MalformedIdentifier(NumberingError):
    """A stored identifier cannot be parsed back into (prefix, bucket, sequence)."""

    pass


class AllocationConflict(NumberingError):
    """The allocated identifier is already taken (unique constraint violation).

    Retryable by allocating again for the same series.
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Identifier {identifier} is already allocated")


class StoreUnavailable(NumberingError):
    """The record store could not be reached or timed out. Retryable with backoff."""

    pass


class SeriesLockTimeout(StoreUnavailable):
    """Timed out waiting for another allocation in the same series."""

    def __init__(self, series_key: str, timeout: float | None):
        self.series_key = series_key
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout}s waiting for series lock {series_key}")
