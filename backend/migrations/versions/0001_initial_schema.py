"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 10:12:41.204113

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("client_id", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_profiles_email"), "user_profiles", ["email"])
    op.create_index(op.f("ix_user_profiles_role"), "user_profiles", ["role"])
    op.create_index(op.f("ix_user_profiles_client_id"), "user_profiles", ["client_id"])

    # Identifier columns carry named unique constraints: a duplicate number
    # is detected by name and retried by the allocator
    op.create_table(
        "work_orders",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("order_number", sa.String(length=32), nullable=False),
        sa.Column("client_id", sa.String(), nullable=True),
        sa.Column("location_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("service_type", sa.String(), nullable=True),
        sa.Column("priority", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("estimated_cost", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("actual_cost", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("billable", sa.Boolean(), nullable=False),
        sa.Column("completion_notes", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column("assigned_to", sa.String(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_by", sa.String(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_number", name="uq_work_orders_order_number"),
    )
    op.create_index(op.f("ix_work_orders_client_id"), "work_orders", ["client_id"])
    op.create_index(op.f("ix_work_orders_status"), "work_orders", ["status"])
    op.create_index(op.f("ix_work_orders_created_by"), "work_orders", ["created_by"])
    op.create_index(op.f("ix_work_orders_assigned_to"), "work_orders", ["assigned_to"])

    op.create_table(
        "rfps",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("rfp_number", sa.String(length=32), nullable=False),
        sa.Column("client_id", sa.String(), nullable=True),
        sa.Column("location_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("scope_of_work", sa.String(), nullable=True),
        sa.Column("budget_min", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("budget_max", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("created_by", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("rfp_number", name="uq_rfps_rfp_number"),
    )
    op.create_index(op.f("ix_rfps_client_id"), "rfps", ["client_id"])
    op.create_index(op.f("ix_rfps_status"), "rfps", ["status"])
    op.create_index(op.f("ix_rfps_created_by"), "rfps", ["created_by"])

    op.create_table(
        "bids",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("bid_number", sa.String(length=32), nullable=False),
        sa.Column("rfp_id", sa.String(length=26), nullable=False),
        sa.Column("bidder_id", sa.String(), nullable=False),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("total_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("executive_summary", sa.String(), nullable=True),
        sa.Column("technical_approach", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["rfp_id"], ["rfps.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("bid_number", name="uq_bids_bid_number"),
    )
    op.create_index(op.f("ix_bids_rfp_id"), "bids", ["rfp_id"])
    op.create_index(op.f("ix_bids_bidder_id"), "bids", ["bidder_id"])
    op.create_index(op.f("ix_bids_status"), "bids", ["status"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("invoice_number", sa.String(length=32), nullable=False),
        sa.Column("vendor", sa.String(), nullable=False),
        sa.Column("customer", sa.String(), nullable=False),
        sa.Column("work_order_id", sa.String(length=26), nullable=True),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("subtotal", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("tax_rate", sa.Numeric(precision=6, scale=4), nullable=False),
        sa.Column("tax", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("total", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["work_order_id"], ["work_orders.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
    )
    op.create_index(op.f("ix_invoices_status"), "invoices", ["status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("action_url", sa.String(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_notifications_user_id"), "notifications", ["user_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_notifications_user_id"), table_name="notifications")
    op.drop_table("notifications")

    op.drop_index(op.f("ix_invoices_status"), table_name="invoices")
    op.drop_table("invoices")

    op.drop_index(op.f("ix_bids_status"), table_name="bids")
    op.drop_index(op.f("ix_bids_bidder_id"), table_name="bids")
    op.drop_index(op.f("ix_bids_rfp_id"), table_name="bids")
    op.drop_table("bids")

    op.drop_index(op.f("ix_rfps_created_by"), table_name="rfps")
    op.drop_index(op.f("ix_rfps_status"), table_name="rfps")
    op.drop_index(op.f("ix_rfps_client_id"), table_name="rfps")
    op.drop_table("rfps")

    op.drop_index(op.f("ix_work_orders_assigned_to"), table_name="work_orders")
    op.drop_index(op.f("ix_work_orders_created_by"), table_name="work_orders")
    op.drop_index(op.f("ix_work_orders_status"), table_name="work_orders")
    op.drop_index(op.f("ix_work_orders_client_id"), table_name="work_orders")
    op.drop_table("work_orders")

    op.drop_index(op.f("ix_user_profiles_client_id"), table_name="user_profiles")
    op.drop_index(op.f("ix_user_profiles_role"), table_name="user_profiles")
    op.drop_index(op.f("ix_user_profiles_email"), table_name="user_profiles")
    op.drop_table("user_profiles")
