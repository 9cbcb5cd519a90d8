"""Work order domain exceptions."""

from app.services.exceptions import NotFoundError


class WorkOrderNotFound(NotFoundError):
    """Work order not found or not visible to the current user."""

    pass
