"""RFP and bid management service."""

from typing import Any

import structlog
from sqlalchemy import delete, false, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import select

from app.models.enums import BidStatus, NotificationType, RfpStatus, UserRole
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
from app.services.exceptions import PermissionDenied
from app.services.notifications.notification_service import NotificationService
from app.services.numbering import DocumentPrefix, create_numbered_record
from app.services.rfps.exceptions import BidNotFound, BidNotOnRfp, RfpNotFound, RfpNotOpen
from app.utils.datetime_utils import utc_now

logger = structlog.get_logger(__name__)

RFP_CREATOR_ROLES = frozenset({UserRole.ADMIN, UserRole.CLIENT})
BIDDER_ROLES = frozenset({UserRole.ADMIN, UserRole.SUBCONTRACTOR})


def rfp_visibility_filter(user: UserProfile) -> ColumnElement[bool] | None:
    """Admins see every RFP, clients their own, everybody else open RFPs only."""
    if user.role == UserRole.ADMIN:
        return None
    if user.role == UserRole.CLIENT:
        if not user.client_id:
            return false()
        return Rfp.client_id == user.client_id  # type: ignore[return-value]
    return Rfp.status == RfpStatus.OPEN  # type: ignore[return-value]


def bid_visibility_filter(user: UserProfile) -> ColumnElement[bool] | None:
    """Admins see every bid, clients bids on their RFPs, bidders their own."""
    if user.role == UserRole.ADMIN:
        return None
    if user.role == UserRole.CLIENT:
        if not user.client_id:
            return false()
        client_rfps = select(Rfp.id).where(Rfp.client_id == user.client_id)
        return Bid.rfp_id.in_(client_rfps)  # type: ignore[attr-defined,no-any-return]
    return Bid.bidder_id == user.id  # type: ignore[return-value]


class RfpService:
    """Service for RFPs and the bids placed on them."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notifications = NotificationService(session)

    async def list_rfps(
        self,
        user: UserProfile,
        *,
        status: RfpStatus | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Rfp], int]:
        filters: list[Any] = []
        visible = rfp_visibility_filter(user)
        if visible is not None:
            filters.append(visible)
        if status is not None:
            filters.append(Rfp.status == status)

        statement = (
            select(Rfp)
            .where(*filters)
            .order_by(Rfp.created_at.desc(), Rfp.id.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        count_result = await self.session.execute(select(func.count()).select_from(Rfp).where(*filters))
        return list(result.scalars().all()), count_result.scalar() or 0

    async def get_rfp(self, rfp_id: str, user: UserProfile) -> Rfp:
        statement = select(Rfp).where(Rfp.id == rfp_id)
        visible = rfp_visibility_filter(user)
        if visible is not None:
            statement = statement.where(visible)
        result = await self.session.execute(statement)
        rfp = result.scalars().first()
        if not rfp:
            raise RfpNotFound()
        return rfp

    async def create_rfp(self, data: RfpCreate, user: UserProfile) -> Rfp:
        """Create an RFP numbered ``RFP-YYYY-NNNN``.

        Published RFPs open immediately and every active subcontractor is notified.
        """
        if user.role not in RFP_CREATOR_ROLES:
            raise PermissionDenied("Only admins and clients can create RFPs")

        creator_id = user.id
        client_id = data.client_id if user.role == UserRole.ADMIN else user.client_id
        fields = data.model_dump(exclude={"client_id", "publish"})
        status = RfpStatus.OPEN if data.publish else RfpStatus.DRAFT

        rfp = await create_numbered_record(
            self.session,
            DocumentPrefix.RFP,
            Rfp.rfp_number,
            RFP_NUMBER_CONSTRAINT,
            lambda rfp_number: Rfp(
                rfp_number=rfp_number,
                client_id=client_id,
                created_by=creator_id,
                status=status,
                **fields,
            ),
        )
        logger.info("Created RFP", rfp_id=rfp.id, rfp_number=rfp.rfp_number, status=rfp.status)

        if rfp.status == RfpStatus.OPEN:
            await self._notify_rfp_opened(rfp)
        return rfp

    async def update_rfp(self, rfp_id: str, data: RfpUpdate, user: UserProfile) -> Rfp:
        """Apply a partial update.

        Admins and the RFP's creator may update. Opening a draft notifies
        subcontractors; awarding with a selected bid notifies the winner.
        """
        rfp = await self.get_rfp(rfp_id, user)
        if user.role != UserRole.ADMIN and rfp.created_by != user.id:
            raise PermissionDenied("You do not have permission to update this RFP")

        changes = data.model_dump(exclude_unset=True)
        if user.role != UserRole.ADMIN and {"selected_bid_id", "selection_notes"} & changes.keys():
            raise PermissionDenied("Only admins can select a bid")

        selected_bid: Bid | None = None
        if changes.get("selected_bid_id"):
            selected_bid = await self.session.get(Bid, changes["selected_bid_id"])
            if selected_bid is None or selected_bid.rfp_id != rfp.id:
                raise BidNotOnRfp(f"Bid {changes['selected_bid_id']} was not placed on RFP {rfp.rfp_number}")
        elif changes.get("status") == RfpStatus.AWARDED and rfp.selected_bid_id:
            selected_bid = await self.session.get(Bid, rfp.selected_bid_id)

        was_open = rfp.status == RfpStatus.OPEN
        for key, value in changes.items():
            setattr(rfp, key, value)
        rfp.updated_at = utc_now()
        await self.session.commit()

        logger.info("Updated RFP", rfp_id=rfp.id, fields=sorted(changes), updated_by=user.id)

        if rfp.status == RfpStatus.OPEN and not was_open:
            await self._notify_rfp_opened(rfp)
        if changes.get("status") == RfpStatus.AWARDED and selected_bid is not None:
            await self.notifications.notify(
                selected_bid.bidder_id,
                type=NotificationType.RFP,
                title="Bid Awarded!",
                message=f'Your bid for "{rfp.title}" has been selected!',
                data={"rfp_id": rfp.id, "bid_id": selected_bid.id},
                action_url=f"/rfps/{rfp.id}",
            )
        return rfp

    async def delete_rfp(self, rfp_id: str, user: UserProfile) -> None:
        """Delete an RFP and its bids (admin only)."""
        if user.role != UserRole.ADMIN:
            raise PermissionDenied("Only admins can delete RFPs")
        rfp = await self.session.get(Rfp, rfp_id)
        if rfp is None:
            raise RfpNotFound()

        rfp_number = rfp.rfp_number
        await self.session.execute(delete(Bid).where(Bid.rfp_id == rfp_id))  # type: ignore[arg-type]
        await self.session.delete(rfp)
        await self.session.commit()
        logger.info("Deleted RFP", rfp_id=rfp_id, rfp_number=rfp_number, deleted_by=user.id)

    async def _notify_rfp_opened(self, rfp: Rfp) -> None:
        result = await self.session.execute(
            select(UserProfile.id).where(
                UserProfile.role == UserRole.SUBCONTRACTOR,
                UserProfile.is_active == True,  # noqa: E712
            )
        )
        await self.notifications.notify(
            list(result.scalars().all()),
            type=NotificationType.RFP,
            title="New RFP Available",
            message=f"New RFP: {rfp.title}",
            data={"rfp_id": rfp.id},
            action_url=f"/rfps/{rfp.id}",
        )

    async def list_bids(
        self,
        user: UserProfile,
        *,
        rfp_id: str | None = None,
        status: BidStatus | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Bid], int]:
        filters: list[Any] = []
        visible = bid_visibility_filter(user)
        if visible is not None:
            filters.append(visible)
        if rfp_id is not None:
            filters.append(Bid.rfp_id == rfp_id)
        if status is not None:
            filters.append(Bid.status == status)

        statement = (
            select(Bid)
            .where(*filters)
            .order_by(Bid.created_at.desc(), Bid.id.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        count_result = await self.session.execute(select(func.count()).select_from(Bid).where(*filters))
        return list(result.scalars().all()), count_result.scalar() or 0

    async def create_bid(self, data: BidCreate, user: UserProfile) -> Bid:
        """Place a bid numbered ``BID-YYYY-NNNN``.

        Subcontractors may only bid on open RFPs. A submitted bid notifies the
        RFP's creator; a draft does not.
        """
        if user.role not in BIDDER_ROLES:
            raise PermissionDenied("Only subcontractors can submit bids")

        rfp = await self.session.get(Rfp, data.rfp_id)
        if rfp is None:
            raise RfpNotFound()
        if user.role != UserRole.ADMIN and rfp.status != RfpStatus.OPEN:
            raise RfpNotOpen(f"RFP {rfp.rfp_number} is not open for bids")

        # Plain values: a conflict retry rolls back the session and expires loaded objects
        bidder_id = user.id
        company_name = user.company_name or data.company_name
        rfp_title, rfp_owner = rfp.title, rfp.created_by
        fields = data.model_dump(exclude={"company_name", "submit"})
        status = BidStatus.SUBMITTED if data.submit else BidStatus.DRAFT
        submitted_at = utc_now() if data.submit else None

        bid = await create_numbered_record(
            self.session,
            DocumentPrefix.BID,
            Bid.bid_number,
            BID_NUMBER_CONSTRAINT,
            lambda bid_number: Bid(
                bid_number=bid_number,
                bidder_id=bidder_id,
                company_name=company_name,
                status=status,
                submitted_at=submitted_at,
                **fields,
            ),
        )
        logger.info("Created bid", bid_id=bid.id, bid_number=bid.bid_number, rfp_id=bid.rfp_id, status=bid.status)

        if bid.status == BidStatus.SUBMITTED:
            await self._notify_bid_submitted(bid, rfp_owner=rfp_owner, rfp_title=rfp_title)
        return bid

    async def update_bid(self, bid_id: str, data: BidUpdate, user: UserProfile) -> Bid:
        """Edit a draft bid or submit it.

        Bidders may only change their own drafts; admins may change any bid
        and set its status.
        """
        statement = select(Bid).where(Bid.id == bid_id)
        visible = bid_visibility_filter(user)
        if visible is not None:
            statement = statement.where(visible)
        result = await self.session.execute(statement)
        bid = result.scalars().first()
        if not bid:
            raise BidNotFound()

        is_admin = user.role == UserRole.ADMIN
        if not is_admin and bid.bidder_id != user.id:
            raise PermissionDenied("You do not have permission to update this bid")
        if not is_admin and bid.status != BidStatus.DRAFT:
            raise PermissionDenied("Cannot modify submitted bids")

        changes = data.model_dump(exclude_unset=True, exclude={"submit"})
        if not is_admin and "status" in changes:
            raise PermissionDenied("Only admins can change a bid's status")

        now = utc_now()
        submitted = data.submit and bid.status == BidStatus.DRAFT
        for key, value in changes.items():
            setattr(bid, key, value)
        if submitted:
            bid.status = BidStatus.SUBMITTED
            bid.submitted_at = now
        bid.updated_at = now
        await self.session.commit()

        logger.info("Updated bid", bid_id=bid.id, fields=sorted(changes), submitted=submitted, updated_by=user.id)

        if submitted:
            rfp = await self.session.get(Rfp, bid.rfp_id)
            if rfp is not None:
                await self._notify_bid_submitted(bid, rfp_owner=rfp.created_by, rfp_title=rfp.title)
        return bid

    async def _notify_bid_submitted(self, bid: Bid, *, rfp_owner: str, rfp_title: str) -> None:
        await self.notifications.notify(
            rfp_owner,
            type=NotificationType.RFP,
            title="New Bid Received",
            message=f"New bid received for RFP: {rfp_title}",
            data={"rfp_id": bid.rfp_id, "bid_id": bid.id},
            action_url=f"/rfps/{bid.rfp_id}/bids/{bid.id}",
        )
