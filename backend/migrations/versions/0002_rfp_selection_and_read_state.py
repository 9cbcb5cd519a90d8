"""Add RFP bid selection, notification read time and invoice updated_at.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: str | None = "0001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column("rfps", sa.Column("selected_bid_id", sa.String(length=26), nullable=True))
    op.add_column("rfps", sa.Column("selection_notes", sa.String(), nullable=True))
    op.add_column("notifications", sa.Column("read_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column(
        "invoices",
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.alter_column("invoices", "updated_at", server_default=None)


def downgrade() -> None:
    op.drop_column("invoices", "updated_at")
    op.drop_column("notifications", "read_at")
    op.drop_column("rfps", "selection_notes")
    op.drop_column("rfps", "selected_bid_id")
