"""Record stores consulted by the sequence allocator."""

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Generic, Protocol, TypeVar

import structlog
from sqlalchemy import UniqueConstraint, func, select, text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.services.numbering.exceptions import AllocationConflict, StoreUnavailable

logger = structlog.get_logger(__name__)

TModel = TypeVar("TModel", bound=SQLModel)


class RecordStore(Protocol):
    """What the allocator needs from persistent storage."""

    def series_lock(self, series_key: str) -> AbstractAsyncContextManager[None]:
        """Cross-process exclusion for one series (may be a no-op)."""
        ...

    async def find_max_identifier(self, pattern: str) -> str | None:
        """Greatest identifier matching ``PREFIX-BUCKET-*``, or None."""
        ...

    async def reserve_or_insert(self, record: Any) -> Any:
        """Persist a record carrying a freshly allocated identifier.

        Raises:
            AllocationConflict: identifier already taken
            StoreUnavailable: store unreachable or timed out
        """
        ...


def _is_unavailable(exc: Exception) -> bool:
    if isinstance(exc, OperationalError | PoolTimeoutError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class SqlRecordStore(Generic[TModel]):
    """RecordStore backed by a SQLAlchemy async session.

    The identifier column must carry a named unique constraint; a violation
    of that constraint is reported as AllocationConflict, any other
    integrity error propagates unchanged.

    Usage:
        store = SqlRecordStore(session, WorkOrder.order_number, WORK_ORDER_NUMBER_CONSTRAINT)
        allocator = SequenceAllocator(store)
    """

    def __init__(
        self,
        session: AsyncSession,
        identifier_column: Any,  # InstrumentedAttribute at runtime
        constraint: UniqueConstraint,
    ):
        if not constraint.name:
            raise ValueError("UniqueConstraint must have a name for conflict detection.")
        self.session = session
        self.identifier_column = identifier_column
        self.constraint = constraint
        self.table_name: str = identifier_column.class_.__tablename__
        self.column_name: str = identifier_column.key

    @asynccontextmanager
    async def series_lock(self, series_key: str) -> AsyncIterator[None]:
        """Hold a transaction-scoped advisory lock on PostgreSQL.

        The lock is released by the commit in reserve_or_insert, or by the
        rollback issued here if anything inside the block fails.
        """
        try:
            if self.session.get_bind().dialect.name == "postgresql":
                await self._execute(
                    text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                    {"key": series_key},
                )
            yield
        except BaseException:
            await self.session.rollback()
            raise

    async def find_max_identifier(self, pattern: str) -> str | None:
        if not pattern.endswith("*"):
            raise ValueError(f"Pattern must end with '*', got {pattern!r}")
        stem = pattern[:-1]
        column = self.identifier_column
        # Longer suffix means larger number once the sequence outgrows its padding
        stmt = (
            select(column)
            .where(column.like(f"{stem}%"), column.not_like(f"{stem}%-%"))
            .order_by(func.length(column).desc(), column.desc())
            .limit(1)
        )
        result = await self._execute(stmt)
        value: str | None = result.scalars().first()
        return value

    async def reserve_or_insert(self, record: TModel) -> TModel:
        identifier = getattr(record, self.column_name)
        self.session.add(record)
        try:
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if self._is_identifier_conflict(e):
                logger.warning(
                    "Identifier already taken",
                    identifier=identifier,
                    constraint=self.constraint.name,
                )
                raise AllocationConflict(identifier) from e
            raise
        except DBAPIError as e:
            await self.session.rollback()
            if _is_unavailable(e):
                raise StoreUnavailable(f"Could not persist {identifier}: {e}") from e
            raise
        except PoolTimeoutError as e:
            await self.session.rollback()
            raise StoreUnavailable(f"Could not persist {identifier}: {e}") from e
        return record

    def _is_identifier_conflict(self, exc: IntegrityError) -> bool:
        error_str = str(exc).lower()
        # PostgreSQL names the constraint, SQLite names table.column
        return (
            f'"{self.constraint.name}"'.lower() in error_str
            or f"{self.table_name}.{self.column_name}".lower() in error_str
        )

    async def _execute(self, statement: Any, params: dict[str, Any] | None = None) -> Any:
        try:
            return await self.session.execute(statement, params)
        except (DBAPIError, PoolTimeoutError) as e:
            if _is_unavailable(e):
                raise StoreUnavailable(f"Record store unavailable: {e}") from e
            raise
