"""Creating database records that carry an allocated identifier."""

from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import UniqueConstraint
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.services.numbering.allocator import SequenceAllocator
from app.services.numbering.series import DocumentPrefix, Identifier, bucket_for
from app.services.numbering.store import SqlRecordStore

TModel = TypeVar("TModel", bound=SQLModel)


async def create_numbered_record(
    session: AsyncSession,
    prefix: DocumentPrefix,
    identifier_column: Any,  # InstrumentedAttribute at runtime
    constraint: UniqueConstraint,
    build: Callable[[str], TModel],
    *,
    when: datetime | None = None,
) -> TModel:
    """Allocate the next identifier for ``prefix`` and insert ``build(identifier)``.

    ``build`` may be called more than once if a concurrent writer takes the
    identifier first; it must return a fresh, unsaved model each time.
    The record is committed on return.
    """
    store: SqlRecordStore[TModel] = SqlRecordStore(session, identifier_column, constraint)
    allocator = SequenceAllocator(store)

    async def persist(identifier: Identifier) -> TModel:
        return await store.reserve_or_insert(build(str(identifier)))

    return await allocator.allocate_and_persist(prefix, bucket_for(prefix, when), persist)
