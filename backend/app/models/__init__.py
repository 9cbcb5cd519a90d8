"""Database models."""

from sqlmodel import SQLModel

from app.models.enums import (
    BidStatus,
    InvoiceStatus,
    NotificationType,
    RfpStatus,
    UserRole,
    WorkOrderPriority,
    WorkOrderStatus,
)
from app.models.invoice import INVOICE_NUMBER_CONSTRAINT, Invoice, InvoiceCreate, InvoiceItem
from app.models.notification import Notification, NotificationBulkRead, NotificationReadUpdate
from app.models.rfp import (
    BID_NUMBER_CONSTRAINT,
    RFP_NUMBER_CONSTRAINT,
    Bid,
    BidCreate,
    BidUpdate,
    Rfp,
    RfpCreate,
    RfpUpdate,
)
from app.models.user import UserProfile
from app.models.work_order import WORK_ORDER_NUMBER_CONSTRAINT, WorkOrder, WorkOrderCreate, WorkOrderUpdate

__all__ = [
    "SQLModel",
    "BID_NUMBER_CONSTRAINT",
    "INVOICE_NUMBER_CONSTRAINT",
    "RFP_NUMBER_CONSTRAINT",
    "WORK_ORDER_NUMBER_CONSTRAINT",
    "Bid",
    "BidCreate",
    "BidUpdate",
    "BidStatus",
    "Invoice",
    "InvoiceCreate",
    "InvoiceItem",
    "InvoiceStatus",
    "Notification",
    "NotificationBulkRead",
    "NotificationReadUpdate",
    "NotificationType",
    "Rfp",
    "RfpCreate",
    "RfpUpdate",
    "RfpStatus",
    "UserProfile",
    "UserRole",
    "WorkOrder",
    "WorkOrderCreate",
    "WorkOrderPriority",
    "WorkOrderStatus",
    "WorkOrderUpdate",
]
