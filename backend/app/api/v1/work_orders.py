"""Work order API endpoints."""

from fastapi import APIRouter, HTTPException

from app.api.v1.dependencies import CurrentUser, WorkOrderServiceDep
from app.api.v1.schemas import WorkOrderListResponse, WorkOrderResponse
from app.models.enums import WorkOrderPriority, WorkOrderStatus
from app.models.work_order import WorkOrderCreate, WorkOrderUpdate
from app.services.exceptions import PermissionDenied
from app.services.numbering import AllocationConflict, StoreUnavailable
from app.services.work_orders.exceptions import WorkOrderNotFound

router = APIRouter(tags=["work-orders"])


@router.get("/work-orders", response_model=WorkOrderListResponse, operation_id="listWorkOrders")
async def list_work_orders(
    user: CurrentUser,
    service: WorkOrderServiceDep,
    status: WorkOrderStatus | None = None,
    priority: WorkOrderPriority | None = None,
    skip: int = 0,
    limit: int = 50,
) -> WorkOrderListResponse:
    """List work orders visible to the current user."""
    work_orders, total = await service.list_work_orders(
        user, status=status, priority=priority, skip=skip, limit=limit
    )
    return WorkOrderListResponse(
        work_orders=[WorkOrderResponse.from_model(wo) for wo in work_orders],
        total=total,
    )


@router.get("/work-orders/{work_order_id}", response_model=WorkOrderResponse, operation_id="getWorkOrder")
async def get_work_order(
    work_order_id: str,
    user: CurrentUser,
    service: WorkOrderServiceDep,
) -> WorkOrderResponse:
    try:
        work_order = await service.get_work_order(work_order_id, user)
    except WorkOrderNotFound:
        raise HTTPException(status_code=404, detail="Work order not found")
    return WorkOrderResponse.from_model(work_order)


@router.post(
    "/work-orders",
    response_model=WorkOrderResponse,
    status_code=201,
    operation_id="createWorkOrder",
)
async def create_work_order(
    payload: WorkOrderCreate,
    user: CurrentUser,
    service: WorkOrderServiceDep,
) -> WorkOrderResponse:
    """Create a work order with the next ``WO-YYYY-MM-NNNN`` number."""
    try:
        work_order = await service.create_work_order(payload, user)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except AllocationConflict:
        raise HTTPException(status_code=409, detail="Could not allocate a work order number, please retry")
    except StoreUnavailable:
        raise HTTPException(status_code=503, detail="Database temporarily unavailable")
    return WorkOrderResponse.from_model(work_order)


@router.put("/work-orders/{work_order_id}", response_model=WorkOrderResponse, operation_id="updateWorkOrder")
async def update_work_order(
    work_order_id: str,
    payload: WorkOrderUpdate,
    user: CurrentUser,
    service: WorkOrderServiceDep,
) -> WorkOrderResponse:
    try:
        work_order = await service.update_work_order(work_order_id, payload, user)
    except WorkOrderNotFound:
        raise HTTPException(status_code=404, detail="Work order not found")
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    return WorkOrderResponse.from_model(work_order)


@router.delete("/work-orders/{work_order_id}", status_code=204, operation_id="deleteWorkOrder")
async def delete_work_order(work_order_id: str, user: CurrentUser, service: WorkOrderServiceDep) -> None:
    try:
        await service.delete_work_order(work_order_id, user)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except WorkOrderNotFound:
        raise HTTPException(status_code=404, detail="Work order not found")
