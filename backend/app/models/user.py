"""User profile model."""

from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from app.models.enums import UserRole
from app.models.types import enum_column
from app.utils.datetime_utils import utc_now


class UserProfile(SQLModel, table=True):
    """Portal profile for an authenticated identity.

    ``id`` is the ``sub`` claim of the identity provider's token.
    ``client_id`` links client users to the client organisation whose
    work orders and RFPs they may see.
    """

    __tablename__ = "user_profiles"

    id: str = Field(primary_key=True, max_length=64)
    email: str = Field(index=True)
    full_name: str | None = None
    role: UserRole = Field(default=UserRole.CLIENT, sa_column=enum_column(UserRole, index=True))
    company_name: str | None = None
    client_id: str | None = Field(default=None, index=True)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
