"""FastAPI dependencies for authentication and service injection."""

from typing import Annotated

import jwt
import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db import get_session
from app.models.user import UserProfile
from app.services.invoices.invoice_service import InvoiceService
from app.services.notifications.notification_service import NotificationService
from app.services.rfps.rfp_service import RfpService
from app.services.work_orders.work_order_service import WorkOrderService

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: SessionDep,
) -> UserProfile:
    """Resolve the bearer token to an active user profile."""
    if credentials is None:
        raise _unauthorized("No valid auth token provided")

    try:
        claims = jwt.decode(
            credentials.credentials,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
        )
    except jwt.InvalidTokenError as e:
        logger.info("Rejected bearer token", error=str(e))
        raise _unauthorized("Invalid or expired token")

    user_id = claims.get("sub")
    if not user_id:
        raise _unauthorized("Token has no subject")

    user = await session.get(UserProfile, user_id)
    if user is None or not user.is_active:
        logger.info("No active profile for token subject", user_id=user_id)
        raise _unauthorized("User profile not found")
    return user


async def get_work_order_service(session: SessionDep) -> WorkOrderService:
    """Get a WorkOrderService instance with the current session."""
    return WorkOrderService(session)


async def get_rfp_service(session: SessionDep) -> RfpService:
    """Get an RfpService instance with the current session."""
    return RfpService(session)


async def get_invoice_service(session: SessionDep) -> InvoiceService:
    """Get an InvoiceService instance with the current session."""
    return InvoiceService(session)


async def get_notification_service(session: SessionDep) -> NotificationService:
    """Get a NotificationService instance with the current session."""
    return NotificationService(session)


# Type aliases for cleaner endpoint signatures
CurrentUser = Annotated[UserProfile, Depends(get_current_user)]
WorkOrderServiceDep = Annotated[WorkOrderService, Depends(get_work_order_service)]
RfpServiceDep = Annotated[RfpService, Depends(get_rfp_service)]
InvoiceServiceDep = Annotated[InvoiceService, Depends(get_invoice_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
