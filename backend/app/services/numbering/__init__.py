"""Sequential, human-readable document identifiers.

- series: prefixes, buckets and identifier formatting
- allocator: SequenceAllocator (read max, format, persist under lock)
- store: RecordStore protocol and the SQLAlchemy implementation
- locks: in-process per-series locks
- records: helper for creating numbered database records
"""

from app.services.numbering.allocator import AllocationRetryConfig, SequenceAllocator
from app.services.numbering.exceptions import (
    AllocationConflict,
    InvalidSeriesKey,
    MalformedIdentifier,
    NumberingError,
    SeriesLockTimeout,
    StoreUnavailable,
)
from app.services.numbering.locks import SeriesLocks, series_locks
from app.services.numbering.records import create_numbered_record
from app.services.numbering.series import (
    DocumentPrefix,
    Identifier,
    SeriesGranularity,
    SeriesKey,
    bucket_for,
)
from app.services.numbering.store import RecordStore, SqlRecordStore

__all__ = [
    "AllocationConflict",
    "AllocationRetryConfig",
    "DocumentPrefix",
    "Identifier",
    "InvalidSeriesKey",
    "MalformedIdentifier",
    "NumberingError",
    "RecordStore",
    "SequenceAllocator",
    "SeriesGranularity",
    "SeriesKey",
    "SeriesLockTimeout",
    "SeriesLocks",
    "SqlRecordStore",
    "StoreUnavailable",
    "bucket_for",
    "create_numbered_record",
    "series_locks",
]
