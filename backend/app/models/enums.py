"""Enum definitions for database models."""

from enum import StrEnum


class UserRole(StrEnum):
    """Portal role stored on the user profile."""

    ADMIN = "admin"
    CLIENT = "client"
    SUBCONTRACTOR = "subcontractor"
    FIELD_TECH = "field_tech"


class WorkOrderStatus(StrEnum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkOrderPriority(StrEnum):
    LOW = "low"
    STANDARD = "standard"
    HIGH = "high"
    EMERGENCY = "emergency"


class RfpStatus(StrEnum):
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"
    AWARDED = "awarded"


class BidStatus(StrEnum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class InvoiceStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    VOID = "void"


class NotificationType(StrEnum):
    """Category shown next to a notification in the portal."""

    WORK_ORDER = "work_order"
    RFP = "rfp"
    INVOICE = "invoice"
