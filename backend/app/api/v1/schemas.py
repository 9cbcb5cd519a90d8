"""API response schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, PlainSerializer

from app.models.enums import (
    BidStatus,
    InvoiceStatus,
    NotificationType,
    RfpStatus,
    WorkOrderPriority,
    WorkOrderStatus,
)
from app.models.invoice import Invoice
from app.models.notification import Notification
from app.models.rfp import Bid, Rfp
from app.models.work_order import WorkOrder
from app.utils.datetime_utils import to_api_timezone


def _serialize_datetime(dt: datetime | None) -> str | None:
    """Serialize datetime in the portal timezone."""
    localized_dt = to_api_timezone(dt)
    return localized_dt.isoformat() if localized_dt else None


ApiDateTime = Annotated[datetime, PlainSerializer(_serialize_datetime, return_type=str)]
OptionalApiDateTime = Annotated[datetime | None, PlainSerializer(_serialize_datetime, return_type=str | None)]


# =============================================================================
# Work orders
# =============================================================================


class WorkOrderResponse(BaseModel):
    id: str
    order_number: str
    client_id: str | None
    location_id: str | None
    title: str
    description: str | None
    category: str | None
    service_type: str | None
    priority: WorkOrderPriority
    status: WorkOrderStatus
    scheduled_date: date | None
    estimated_cost: Decimal | None
    actual_cost: Decimal | None
    billable: bool
    completion_notes: str | None
    created_by: str
    assigned_to: str | None
    assigned_at: OptionalApiDateTime
    actual_start_time: OptionalApiDateTime
    completed_by: str | None
    completed_at: OptionalApiDateTime
    created_at: ApiDateTime
    updated_at: ApiDateTime

    @classmethod
    def from_model(cls, work_order: WorkOrder) -> "WorkOrderResponse":
        """Create response from WorkOrder model."""
        return cls.model_validate(work_order, from_attributes=True)


class WorkOrderListResponse(BaseModel):
    work_orders: list[WorkOrderResponse]
    total: int


# =============================================================================
# RFPs and bids
# =============================================================================


class RfpResponse(BaseModel):
    id: str
    rfp_number: str
    client_id: str | None
    location_id: str | None
    title: str
    description: str | None
    scope_of_work: str | None
    budget_min: Decimal | None
    budget_max: Decimal | None
    due_date: date | None
    status: RfpStatus
    selected_bid_id: str | None
    selection_notes: str | None
    created_by: str
    created_at: ApiDateTime
    updated_at: ApiDateTime

    @classmethod
    def from_model(cls, rfp: Rfp) -> "RfpResponse":
        """Create response from Rfp model."""
        return cls.model_validate(rfp, from_attributes=True)


class RfpListResponse(BaseModel):
    rfps: list[RfpResponse]
    total: int


class BidResponse(BaseModel):
    id: str
    bid_number: str
    rfp_id: str
    bidder_id: str
    company_name: str | None
    total_amount: Decimal
    executive_summary: str | None
    technical_approach: str | None
    status: BidStatus
    submitted_at: OptionalApiDateTime
    created_at: ApiDateTime
    updated_at: ApiDateTime

    @classmethod
    def from_model(cls, bid: Bid) -> "BidResponse":
        """Create response from Bid model."""
        return cls.model_validate(bid, from_attributes=True)


class BidListResponse(BaseModel):
    bids: list[BidResponse]
    total: int


# =============================================================================
# Invoices
# =============================================================================


class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    vendor: str
    customer: str
    work_order_id: str | None
    items: list[dict[str, Any]]
    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    status: InvoiceStatus
    created_at: ApiDateTime
    updated_at: ApiDateTime

    @classmethod
    def from_model(cls, invoice: Invoice) -> "InvoiceResponse":
        """Create response from Invoice model."""
        return cls.model_validate(invoice, from_attributes=True)


class InvoiceListResponse(BaseModel):
    invoices: list[InvoiceResponse]
    total: int


# =============================================================================
# Notifications
# =============================================================================


class NotificationResponse(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any]
    action_url: str | None
    is_read: bool
    read_at: OptionalApiDateTime
    created_at: ApiDateTime

    @classmethod
    def from_model(cls, notification: Notification) -> "NotificationResponse":
        """Create response from Notification model."""
        return cls.model_validate(notification, from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]


class MarkReadResponse(BaseModel):
    updated: int
