"""In-app notification service."""

from collections.abc import Iterable
from typing import Any

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.enums import NotificationType
from app.models.notification import Notification
from app.services.notifications.exceptions import NotificationNotFound
from app.utils.datetime_utils import utc_now

logger = structlog.get_logger(__name__)


class NotificationService:
    """Creates and lists notification rows. Delivery channels are out of scope."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def notify(
        self,
        user_ids: str | Iterable[str],
        *,
        type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
        action_url: str | None = None,
    ) -> list[Notification]:
        """Create one notification per recipient and commit."""
        recipients = [user_ids] if isinstance(user_ids, str) else list(user_ids)
        if not recipients:
            return []

        notifications = [
            Notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                data=data or {},
                action_url=action_url,
            )
            for user_id in recipients
        ]
        self.session.add_all(notifications)
        await self.session.commit()

        logger.info("Created notifications", type=type, title=title, recipients=len(recipients))
        return notifications

    async def list_for_user(self, user_id: str, *, unread_only: bool = False, limit: int = 50) -> list[Notification]:
        statement = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            statement = statement.where(Notification.is_read == False)  # noqa: E712
        statement = statement.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)  # type: ignore[attr-defined]
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def set_read(self, notification_id: str, user_id: str, *, read: bool = True) -> Notification:
        """Mark one of the user's notifications read or unread.

        Raises:
            NotificationNotFound: no such notification for this user
        """
        result = await self.session.execute(
            select(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
        )
        notification = result.scalars().first()
        if notification is None:
            raise NotificationNotFound()

        notification.is_read = read
        notification.read_at = utc_now() if read else None
        await self.session.commit()
        return notification

    async def mark_read(self, user_id: str, ids: list[str] | None = None) -> int:
        """Mark the listed notifications (or every unread one when ``ids`` is None) read.

        Notifications owned by other users are never touched. Returns the number updated.
        """
        statement = update(Notification).where(
            Notification.user_id == user_id,  # type: ignore[arg-type]
            Notification.is_read == False,  # type: ignore[arg-type]  # noqa: E712
        )
        if ids is not None:
            statement = statement.where(Notification.id.in_(ids))  # type: ignore[union-attr]
        result = await self.session.execute(statement.values(is_read=True, read_at=utc_now()))
        count = result.rowcount
        await self.session.commit()

        logger.info("Marked notifications read", user_id=user_id, count=count)
        return count
