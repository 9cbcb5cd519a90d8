"""In-app notification model."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from app.models.enums import NotificationType
from app.models.types import enum_column, new_ulid
from app.utils.datetime_utils import utc_now


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: str = Field(default_factory=new_ulid, primary_key=True, max_length=26)
    user_id: str = Field(index=True)
    type: NotificationType = Field(sa_column=enum_column(NotificationType))
    title: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    action_url: str | None = None
    is_read: bool = False
    read_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))


class NotificationReadUpdate(SQLModel):
    """Mark a single notification read or unread."""

    read: bool = True


class NotificationBulkRead(SQLModel):
    """Mark several notifications read: either the listed ``ids`` or every unread one."""

    ids: list[str] | None = None
    mark_all_read: bool = False
