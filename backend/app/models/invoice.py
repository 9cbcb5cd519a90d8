"""Invoice models."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.models.enums import InvoiceStatus
from app.models.types import enum_column, new_ulid
from app.utils.datetime_utils import utc_now

INVOICE_NUMBER_CONSTRAINT = UniqueConstraint("invoice_number", name="uq_invoices_invoice_number")


class Invoice(SQLModel, table=True):
    """Invoice numbered ``INV-YYYY-NNNN`` with totals computed at creation."""

    __tablename__ = "invoices"
    __table_args__ = (INVOICE_NUMBER_CONSTRAINT,)

    id: str = Field(default_factory=new_ulid, primary_key=True, max_length=26)
    invoice_number: str = Field(max_length=32)

    vendor: str
    customer: str
    work_order_id: str | None = Field(default=None, foreign_key="work_orders.id", max_length=26)
    # [{"description": ..., "quantity": ..., "price": ...}] with decimals as strings
    items: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    tax_rate: Decimal = Field(default=Decimal("0"), max_digits=6, decimal_places=4)
    tax: Decimal = Field(max_digits=12, decimal_places=2)
    total: Decimal = Field(max_digits=12, decimal_places=2)
    status: InvoiceStatus = Field(default=InvoiceStatus.PENDING, sa_column=enum_column(InvoiceStatus, index=True))

    created_by: str
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))


class InvoiceItem(SQLModel):
    description: str = Field(min_length=1)
    quantity: Decimal = Field(gt=0)
    price: Decimal = Field(ge=0)


class InvoiceCreate(SQLModel):
    vendor: str = Field(min_length=1)
    customer: str = Field(min_length=1)
    work_order_id: str | None = None
    items: list[InvoiceItem] = Field(min_length=1)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=1)
