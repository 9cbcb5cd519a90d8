"""Invoice API endpoints."""

from fastapi import APIRouter, HTTPException

from app.api.v1.dependencies import CurrentUser, InvoiceServiceDep
from app.api.v1.schemas import InvoiceListResponse, InvoiceResponse
from app.models.invoice import InvoiceCreate
from app.services.exceptions import PermissionDenied
from app.services.numbering import AllocationConflict, StoreUnavailable
from app.services.work_orders.exceptions import WorkOrderNotFound

router = APIRouter(tags=["invoices"])


@router.get("/invoices", response_model=InvoiceListResponse, operation_id="listInvoices")
async def list_invoices(
    user: CurrentUser,
    service: InvoiceServiceDep,
    skip: int = 0,
    limit: int = 50,
) -> InvoiceListResponse:
    try:
        invoices, total = await service.list_invoices(user, skip=skip, limit=limit)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    return InvoiceListResponse(invoices=[InvoiceResponse.from_model(inv) for inv in invoices], total=total)


@router.post("/invoices", response_model=InvoiceResponse, status_code=201, operation_id="createInvoice")
async def create_invoice(payload: InvoiceCreate, user: CurrentUser, service: InvoiceServiceDep) -> InvoiceResponse:
    """Issue an invoice with the next ``INV-YYYY-NNNN`` number."""
    try:
        invoice = await service.create_invoice(payload, user)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except WorkOrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AllocationConflict:
        raise HTTPException(status_code=409, detail="Could not allocate an invoice number, please retry")
    except StoreUnavailable:
        raise HTTPException(status_code=503, detail="Database temporarily unavailable")
    return InvoiceResponse.from_model(invoice)
