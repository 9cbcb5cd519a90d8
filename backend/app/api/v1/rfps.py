"""RFP and bid API endpoints."""

from fastapi import APIRouter, HTTPException

from app.api.v1.dependencies import CurrentUser, RfpServiceDep
from app.api.v1.schemas import BidListResponse, BidResponse, RfpListResponse, RfpResponse
from app.models.enums import BidStatus, RfpStatus
from app.models.rfp import BidCreate, BidUpdate, RfpCreate, RfpUpdate
from app.services.exceptions import PermissionDenied
from app.services.numbering import AllocationConflict, StoreUnavailable
from app.services.rfps.exceptions import BidNotFound, BidNotOnRfp, RfpNotFound, RfpNotOpen

router = APIRouter(tags=["rfps"])


@router.get("/rfps", response_model=RfpListResponse, operation_id="listRfps")
async def list_rfps(
    user: CurrentUser,
    service: RfpServiceDep,
    status: RfpStatus | None = None,
    skip: int = 0,
    limit: int = 50,
) -> RfpListResponse:
    rfps, total = await service.list_rfps(user, status=status, skip=skip, limit=limit)
    return RfpListResponse(rfps=[RfpResponse.from_model(rfp) for rfp in rfps], total=total)


@router.get("/rfps/{rfp_id}", response_model=RfpResponse, operation_id="getRfp")
async def get_rfp(rfp_id: str, user: CurrentUser, service: RfpServiceDep) -> RfpResponse:
    try:
        rfp = await service.get_rfp(rfp_id, user)
    except RfpNotFound:
        raise HTTPException(status_code=404, detail="RFP not found")
    return RfpResponse.from_model(rfp)


@router.post("/rfps", response_model=RfpResponse, status_code=201, operation_id="createRfp")
async def create_rfp(payload: RfpCreate, user: CurrentUser, service: RfpServiceDep) -> RfpResponse:
    """Create an RFP with the next ``RFP-YYYY-NNNN`` number."""
    try:
        rfp = await service.create_rfp(payload, user)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except AllocationConflict:
        raise HTTPException(status_code=409, detail="Could not allocate an RFP number, please retry")
    except StoreUnavailable:
        raise HTTPException(status_code=503, detail="Database temporarily unavailable")
    return RfpResponse.from_model(rfp)


@router.put("/rfps/{rfp_id}", response_model=RfpResponse, operation_id="updateRfp")
async def update_rfp(rfp_id: str, payload: RfpUpdate, user: CurrentUser, service: RfpServiceDep) -> RfpResponse:
    try:
        rfp = await service.update_rfp(rfp_id, payload, user)
    except RfpNotFound:
        raise HTTPException(status_code=404, detail="RFP not found")
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except BidNotOnRfp as e:
        raise HTTPException(status_code=422, detail=str(e))
    return RfpResponse.from_model(rfp)


@router.delete("/rfps/{rfp_id}", status_code=204, operation_id="deleteRfp")
async def delete_rfp(rfp_id: str, user: CurrentUser, service: RfpServiceDep) -> None:
    try:
        await service.delete_rfp(rfp_id, user)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except RfpNotFound:
        raise HTTPException(status_code=404, detail="RFP not found")


@router.get("/bids", response_model=BidListResponse, operation_id="listBids")
async def list_bids(
    user: CurrentUser,
    service: RfpServiceDep,
    rfp_id: str | None = None,
    status: BidStatus | None = None,
    skip: int = 0,
    limit: int = 50,
) -> BidListResponse:
    bids, total = await service.list_bids(user, rfp_id=rfp_id, status=status, skip=skip, limit=limit)
    return BidListResponse(bids=[BidResponse.from_model(bid) for bid in bids], total=total)


@router.post("/bids", response_model=BidResponse, status_code=201, operation_id="createBid")
async def create_bid(payload: BidCreate, user: CurrentUser, service: RfpServiceDep) -> BidResponse:
    """Place a bid with the next ``BID-YYYY-NNNN`` number."""
    try:
        bid = await service.create_bid(payload, user)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except RfpNotFound:
        raise HTTPException(status_code=404, detail="RFP not found")
    except RfpNotOpen as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AllocationConflict:
        raise HTTPException(status_code=409, detail="Could not allocate a bid number, please retry")
    except StoreUnavailable:
        raise HTTPException(status_code=503, detail="Database temporarily unavailable")
    return BidResponse.from_model(bid)


@router.put("/bids/{bid_id}", response_model=BidResponse, operation_id="updateBid")
async def update_bid(bid_id: str, payload: BidUpdate, user: CurrentUser, service: RfpServiceDep) -> BidResponse:
    """Edit a draft bid, or submit it with ``submit: true``."""
    try:
        bid = await service.update_bid(bid_id, payload, user)
    except BidNotFound:
        raise HTTPException(status_code=404, detail="Bid not found")
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    return BidResponse.from_model(bid)
