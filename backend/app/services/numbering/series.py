"""Series keys and identifier formatting.

An identifier looks like ``WO-2024-06-0007``: entity prefix, calendar
bucket and a sequence number padded to at least four digits. The bucket
is either ``YYYY-MM`` or ``YYYY``; which one an entity uses is a caller
policy captured by ``DocumentPrefix.granularity``.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from app.services.numbering.exceptions import InvalidSeriesKey, MalformedIdentifier
from app.utils.datetime_utils import to_api_timezone

SEQUENCE_WIDTH = 4

_BUCKET_RE = re.compile(r"^\d{4}(-(0[1-9]|1[0-2]))?$")
_SEQUENCE_RE = re.compile(r"^\d+$")


class SeriesGranularity(StrEnum):
    """Calendar window of a series."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


class DocumentPrefix(StrEnum):
    """Closed vocabulary of identifier prefixes."""

    WORK_ORDER = "WO"
    RFP = "RFP"
    BID = "BID"
    INVOICE = "INV"

    @property
    def granularity(self) -> SeriesGranularity:
        # Work orders are high volume and restart every month
        if self is DocumentPrefix.WORK_ORDER:
            return SeriesGranularity.MONTHLY
        return SeriesGranularity.YEARLY


def bucket_for(prefix: DocumentPrefix, when: datetime | None = None) -> str:
    """Return the bucket string for ``prefix`` at ``when`` (default: now).

    The calendar is evaluated in the portal timezone, so a work order created
    late on the 31st local time lands in that month's series.
    """
    localized = to_api_timezone(when or datetime.now(UTC))
    assert localized is not None
    if prefix.granularity is SeriesGranularity.MONTHLY:
        return localized.strftime("%Y-%m")
    return localized.strftime("%Y")


@dataclass(frozen=True)
class SeriesKey:
    """Counter namespace: one prefix within one calendar bucket."""

    prefix: DocumentPrefix
    bucket: str

    @classmethod
    def parse(cls, prefix: str, bucket: str) -> "SeriesKey":
        """Validate raw prefix/bucket strings.

        Raises:
            InvalidSeriesKey: unknown prefix or bucket not ``YYYY``/``YYYY-MM``
        """
        try:
            document_prefix = DocumentPrefix(prefix)
        except ValueError:
            raise InvalidSeriesKey(f"Unknown identifier prefix: {prefix!r}") from None
        if not isinstance(bucket, str) or not _BUCKET_RE.match(bucket):
            raise InvalidSeriesKey(f"Bucket must be YYYY or YYYY-MM, got {bucket!r}")
        return cls(prefix=document_prefix, bucket=bucket)

    @property
    def scan_pattern(self) -> str:
        """Pattern matching every identifier of this series, e.g. ``WO-2024-06-*``."""
        return f"{self}-*"

    def __str__(self) -> str:
        return f"{self.prefix.value}-{self.bucket}"


@dataclass(frozen=True)
class Identifier:
    """A fully formatted document identifier."""

    series: SeriesKey
    sequence: int

    def __post_init__(self) -> None:
        if self.sequence < 1:
            raise MalformedIdentifier(f"Sequence must be positive, got {self.sequence}")

    @property
    def prefix(self) -> DocumentPrefix:
        return self.series.prefix

    @property
    def bucket(self) -> str:
        return self.series.bucket

    @classmethod
    def parse(cls, value: str) -> "Identifier":
        """Split ``PREFIX-BUCKET-SEQ`` back into its parts.

        The sequence is always the last ``-`` segment; everything between the
        prefix and the sequence is the bucket.
        """
        parts = value.split("-")
        if len(parts) < 3 or not _SEQUENCE_RE.match(parts[-1]):
            raise MalformedIdentifier(f"Cannot parse identifier {value!r}")
        try:
            series = SeriesKey.parse(parts[0], "-".join(parts[1:-1]))
        except InvalidSeriesKey as e:
            raise MalformedIdentifier(f"Cannot parse identifier {value!r}: {e}") from e
        return cls(series=series, sequence=int(parts[-1]))

    def __str__(self) -> str:
        return f"{self.series}-{self.sequence:0{SEQUENCE_WIDTH}d}"
