"""Invoice service."""

from decimal import ROUND_HALF_UP, Decimal

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.enums import UserRole
from app.models.invoice import INVOICE_NUMBER_CONSTRAINT, Invoice, InvoiceCreate, InvoiceItem
from app.models.user import UserProfile
from app.models.work_order import WorkOrder
from app.services.exceptions import PermissionDenied
from app.services.numbering import DocumentPrefix, create_numbered_record
from app.services.work_orders.exceptions import WorkOrderNotFound

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


def compute_totals(items: list[InvoiceItem], tax_rate: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """Return (subtotal, tax, total) rounded to cents."""
    subtotal = sum((item.quantity * item.price for item in items), Decimal("0")).quantize(CENTS, ROUND_HALF_UP)
    tax = (subtotal * tax_rate).quantize(CENTS, ROUND_HALF_UP)
    return subtotal, tax, subtotal + tax


class InvoiceService:
    """Service for invoices. Only admins issue and list invoices."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_invoices(self, user: UserProfile, *, skip: int = 0, limit: int = 50) -> tuple[list[Invoice], int]:
        if user.role != UserRole.ADMIN:
            raise PermissionDenied("Only admins can view invoices")
        statement = (
            select(Invoice)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        count_result = await self.session.execute(select(func.count()).select_from(Invoice))
        return list(result.scalars().all()), count_result.scalar() or 0

    async def create_invoice(self, data: InvoiceCreate, user: UserProfile) -> Invoice:
        """Issue an invoice numbered ``INV-YYYY-NNNN``."""
        if user.role != UserRole.ADMIN:
            raise PermissionDenied("Only admins can create invoices")

        # Checked up front: a dangling reference would fail the foreign key on insert
        if data.work_order_id is not None and await self.session.get(WorkOrder, data.work_order_id) is None:
            raise WorkOrderNotFound(f"Work order {data.work_order_id} does not exist")

        creator_id = user.id
        subtotal, tax, total = compute_totals(data.items, data.tax_rate)
        items = [item.model_dump(mode="json") for item in data.items]

        invoice = await create_numbered_record(
            self.session,
            DocumentPrefix.INVOICE,
            Invoice.invoice_number,
            INVOICE_NUMBER_CONSTRAINT,
            lambda invoice_number: Invoice(
                invoice_number=invoice_number,
                vendor=data.vendor,
                customer=data.customer,
                work_order_id=data.work_order_id,
                items=items,
                subtotal=subtotal,
                tax_rate=data.tax_rate,
                tax=tax,
                total=total,
                created_by=creator_id,
            ),
        )
        logger.info("Created invoice", invoice_id=invoice.id, invoice_number=invoice.invoice_number, total=str(total))
        return invoice
