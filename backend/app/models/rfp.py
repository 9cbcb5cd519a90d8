"""RFP and bid models."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.models.enums import BidStatus, RfpStatus
from app.models.types import enum_column, new_ulid
from app.utils.datetime_utils import utc_now

RFP_NUMBER_CONSTRAINT = UniqueConstraint("rfp_number", name="uq_rfps_rfp_number")
BID_NUMBER_CONSTRAINT = UniqueConstraint("bid_number", name="uq_bids_bid_number")


class Rfp(SQLModel, table=True):
    """Request for proposal, numbered ``RFP-YYYY-NNNN``."""

    __tablename__ = "rfps"
    __table_args__ = (RFP_NUMBER_CONSTRAINT,)

    id: str = Field(default_factory=new_ulid, primary_key=True, max_length=26)
    rfp_number: str = Field(max_length=32)

    client_id: str | None = Field(default=None, index=True)
    location_id: str | None = None
    title: str
    description: str | None = None
    scope_of_work: str | None = None
    budget_min: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)
    budget_max: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)
    due_date: date | None = None
    status: RfpStatus = Field(default=RfpStatus.DRAFT, sa_column=enum_column(RfpStatus, index=True))
    selected_bid_id: str | None = Field(default=None, max_length=26)
    selection_notes: str | None = None

    created_by: str = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))


class RfpCreate(SQLModel):
    client_id: str | None = None
    location_id: str | None = None
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    scope_of_work: str | None = None
    budget_min: Decimal | None = Field(default=None, ge=0)
    budget_max: Decimal | None = Field(default=None, ge=0)
    due_date: date | None = None
    publish: bool = False  # open immediately instead of saving a draft


class RfpUpdate(SQLModel):
    """Partial update; ``selected_bid_id`` and ``selection_notes`` are admin only."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    scope_of_work: str | None = None
    budget_min: Decimal | None = Field(default=None, ge=0)
    budget_max: Decimal | None = Field(default=None, ge=0)
    due_date: date | None = None
    status: RfpStatus | None = None
    selected_bid_id: str | None = None
    selection_notes: str | None = None


class Bid(SQLModel, table=True):
    """Subcontractor proposal for an RFP, numbered ``BID-YYYY-NNNN``."""

    __tablename__ = "bids"
    __table_args__ = (BID_NUMBER_CONSTRAINT,)

    id: str = Field(default_factory=new_ulid, primary_key=True, max_length=26)
    bid_number: str = Field(max_length=32)

    rfp_id: str = Field(foreign_key="rfps.id", index=True, max_length=26)
    bidder_id: str = Field(index=True)
    company_name: str | None = None
    total_amount: Decimal = Field(max_digits=12, decimal_places=2)
    executive_summary: str | None = None
    technical_approach: str | None = None
    status: BidStatus = Field(default=BidStatus.DRAFT, sa_column=enum_column(BidStatus, index=True))
    submitted_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))


class BidCreate(SQLModel):
    rfp_id: str
    company_name: str | None = None
    total_amount: Decimal = Field(ge=0)
    executive_summary: str | None = None
    technical_approach: str | None = None
    submit: bool = False  # submit now instead of saving a draft


class BidUpdate(SQLModel):
    """Partial update of a draft bid; ``status`` is admin only."""

    total_amount: Decimal | None = Field(default=None, ge=0)
    executive_summary: str | None = None
    technical_approach: str | None = None
    status: BidStatus | None = None
    submit: bool = False  # submit a draft
