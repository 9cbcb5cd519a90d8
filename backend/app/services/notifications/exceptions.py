"""Notification exceptions."""

from app.services.exceptions import NotFoundError


class NotificationNotFound(NotFoundError):
    """Notification not found or owned by another user."""

    pass
