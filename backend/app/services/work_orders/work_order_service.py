"""Work order management service."""

from typing import Any

import structlog
from sqlalchemy import false, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import select

from app.models.enums import NotificationType, UserRole, WorkOrderPriority, WorkOrderStatus
from app.models.invoice import Invoice
from app.models.user import UserProfile
from app.models.work_order import WORK_ORDER_NUMBER_CONSTRAINT, WorkOrder, WorkOrderCreate, WorkOrderUpdate
from app.services.exceptions import PermissionDenied
from app.services.notifications.notification_service import NotificationService
from app.services.numbering import DocumentPrefix, create_numbered_record
from app.services.work_orders.exceptions import WorkOrderNotFound
from app.utils.datetime_utils import utc_now

logger = structlog.get_logger(__name__)

CREATOR_ROLES = frozenset({UserRole.ADMIN, UserRole.CLIENT})


def visibility_filter(user: UserProfile) -> ColumnElement[bool] | None:
    """Restrict work orders to what ``user`` may see (None means everything)."""
    if user.role == UserRole.ADMIN:
        return None
    if user.role == UserRole.CLIENT:
        if not user.client_id:
            return false()
        return WorkOrder.client_id == user.client_id  # type: ignore[return-value]
    # Subcontractors and field techs only see their assignments
    return WorkOrder.assigned_to == user.id  # type: ignore[return-value]


class WorkOrderService:
    """Service for work order operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notifications = NotificationService(session)

    async def list_work_orders(
        self,
        user: UserProfile,
        *,
        status: WorkOrderStatus | None = None,
        priority: WorkOrderPriority | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[WorkOrder], int]:
        """List visible work orders, newest first. Returns (work_orders, total_count)."""
        filters: list[Any] = []
        visible = visibility_filter(user)
        if visible is not None:
            filters.append(visible)
        if status is not None:
            filters.append(WorkOrder.status == status)
        if priority is not None:
            filters.append(WorkOrder.priority == priority)

        statement = (
            select(WorkOrder)
            .where(*filters)
            .order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        work_orders = list(result.scalars().all())

        count_result = await self.session.execute(select(func.count()).select_from(WorkOrder).where(*filters))
        total = count_result.scalar() or 0
        return work_orders, total

    async def get_work_order(self, work_order_id: str, user: UserProfile) -> WorkOrder:
        statement = select(WorkOrder).where(WorkOrder.id == work_order_id)
        visible = visibility_filter(user)
        if visible is not None:
            statement = statement.where(visible)
        result = await self.session.execute(statement)
        work_order = result.scalars().first()
        if not work_order:
            raise WorkOrderNotFound()
        return work_order

    async def create_work_order(self, data: WorkOrderCreate, user: UserProfile) -> WorkOrder:
        """Create a work order numbered ``WO-YYYY-MM-NNNN``.

        Clients always create work orders for their own organisation; admins
        choose the client.
        """
        if user.role not in CREATOR_ROLES:
            raise PermissionDenied("Only admins and clients can create work orders")

        # Plain values: a conflict retry rolls back the session and expires `user`
        creator_id = user.id
        client_id = data.client_id if user.role == UserRole.ADMIN else user.client_id
        fields = data.model_dump(exclude={"client_id"})
        assigned_at = utc_now() if data.assigned_to else None
        status = WorkOrderStatus.ASSIGNED if data.assigned_to else WorkOrderStatus.PENDING

        def build(order_number: str) -> WorkOrder:
            return WorkOrder(
                order_number=order_number,
                client_id=client_id,
                created_by=creator_id,
                status=status,
                assigned_at=assigned_at,
                **fields,
            )

        work_order = await create_numbered_record(
            self.session,
            DocumentPrefix.WORK_ORDER,
            WorkOrder.order_number,
            WORK_ORDER_NUMBER_CONSTRAINT,
            build,
        )
        logger.info(
            "Created work order",
            work_order_id=work_order.id,
            order_number=work_order.order_number,
            created_by=creator_id,
        )

        if work_order.assigned_to:
            await self._notify_assignment(work_order, title="New Work Order Assigned")
        return work_order

    async def update_work_order(self, work_order_id: str, data: WorkOrderUpdate, user: UserProfile) -> WorkOrder:
        """Apply a partial update.

        Admins, the assignee and the creator may update. Status changes stamp
        start/completion times; a new assignee is notified.
        """
        # Work orders the user cannot see are reported as missing
        work_order = await self.get_work_order(work_order_id, user)

        can_update = user.role == UserRole.ADMIN or user.id in (work_order.assigned_to, work_order.created_by)
        if not can_update:
            raise PermissionDenied("You do not have permission to update this work order")

        changes = data.model_dump(exclude_unset=True)
        now = utc_now()

        new_status = changes.get("status")
        if new_status == WorkOrderStatus.IN_PROGRESS and work_order.actual_start_time is None:
            work_order.actual_start_time = now
        if new_status == WorkOrderStatus.COMPLETED:
            work_order.completed_by = user.id
            work_order.completed_at = now

        new_assignee = changes.get("assigned_to")
        reassigned = new_assignee is not None and new_assignee != work_order.assigned_to
        if reassigned:
            work_order.assigned_at = now
            if new_status is None and work_order.status == WorkOrderStatus.PENDING:
                work_order.status = WorkOrderStatus.ASSIGNED

        for key, value in changes.items():
            setattr(work_order, key, value)
        work_order.updated_at = now
        await self.session.commit()

        logger.info(
            "Updated work order",
            work_order_id=work_order.id,
            fields=sorted(changes),
            updated_by=user.id,
        )

        if reassigned:
            await self._notify_assignment(work_order, title="Work Order Assigned")
        return work_order

    async def delete_work_order(self, work_order_id: str, user: UserProfile) -> None:
        """Delete a work order (admin only). Invoices keep their number but lose the link."""
        if user.role != UserRole.ADMIN:
            raise PermissionDenied("Only admins can delete work orders")
        work_order = await self.session.get(WorkOrder, work_order_id)
        if work_order is None:
            raise WorkOrderNotFound()

        order_number = work_order.order_number
        await self.session.execute(
            update(Invoice).where(Invoice.work_order_id == work_order_id).values(work_order_id=None)  # type: ignore[arg-type]
        )
        await self.session.delete(work_order)
        await self.session.commit()
        logger.info("Deleted work order", work_order_id=work_order_id, order_number=order_number, deleted_by=user.id)

    async def _notify_assignment(self, work_order: WorkOrder, *, title: str) -> None:
        assert work_order.assigned_to is not None
        await self.notifications.notify(
            work_order.assigned_to,
            type=NotificationType.WORK_ORDER,
            title=title,
            message=f"You have been assigned work order {work_order.order_number}",
            data={"work_order_id": work_order.id},
            action_url=f"/work-orders/{work_order.id}",
        )
