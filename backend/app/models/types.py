"""Column helpers shared by the table models."""

from enum import StrEnum

from sqlalchemy import Column, Enum
from ulid import ULID


def new_ulid() -> str:
    """Generate a new ULID string (sortable primary key)."""
    return str(ULID())


def enum_column(enum_class: type[StrEnum], *, index: bool = False) -> Column:  # type: ignore[type-arg]
    """Non-nullable column storing a StrEnum by value.

    Stored as VARCHAR rather than a native database enum, so adding a status
    needs no type migration. A new Column is returned per call because a
    Column cannot be shared between tables.
    """
    return Column(
        Enum(
            enum_class,
            native_enum=False,
            length=32,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        index=index,
    )
