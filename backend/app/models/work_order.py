"""Work order models."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.models.enums import WorkOrderPriority, WorkOrderStatus
from app.models.types import enum_column, new_ulid
from app.utils.datetime_utils import utc_now

# Named so that duplicate numbers surface as AllocationConflict
WORK_ORDER_NUMBER_CONSTRAINT = UniqueConstraint("order_number", name="uq_work_orders_order_number")


class WorkOrder(SQLModel, table=True):
    """Facilities work order, numbered ``WO-YYYY-MM-NNNN``."""

    __tablename__ = "work_orders"
    __table_args__ = (WORK_ORDER_NUMBER_CONSTRAINT,)

    id: str = Field(default_factory=new_ulid, primary_key=True, max_length=26)
    order_number: str = Field(max_length=32)

    client_id: str | None = Field(default=None, index=True)
    location_id: str | None = None
    title: str
    description: str | None = None
    category: str | None = None
    service_type: str | None = None
    priority: WorkOrderPriority = Field(
        default=WorkOrderPriority.STANDARD,
        sa_column=enum_column(WorkOrderPriority),
    )
    status: WorkOrderStatus = Field(
        default=WorkOrderStatus.PENDING,
        sa_column=enum_column(WorkOrderStatus, index=True),
    )
    scheduled_date: date | None = None
    estimated_cost: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)
    actual_cost: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)
    billable: bool = True
    completion_notes: str | None = None

    created_by: str = Field(index=True)
    assigned_to: str | None = Field(default=None, index=True)
    assigned_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    actual_start_time: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    completed_by: str | None = None
    completed_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))


class WorkOrderCreate(SQLModel):
    """Fields accepted when creating a work order."""

    client_id: str | None = None
    location_id: str | None = None
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    category: str | None = None
    service_type: str | None = None
    priority: WorkOrderPriority = WorkOrderPriority.STANDARD
    scheduled_date: date | None = None
    estimated_cost: Decimal | None = Field(default=None, ge=0)
    billable: bool = True
    assigned_to: str | None = None


class WorkOrderUpdate(SQLModel):
    """Partial update; only fields that were sent are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: str | None = None
    service_type: str | None = None
    priority: WorkOrderPriority | None = None
    status: WorkOrderStatus | None = None
    assigned_to: str | None = None
    scheduled_date: date | None = None
    actual_cost: Decimal | None = Field(default=None, ge=0)
    completion_notes: str | None = None
