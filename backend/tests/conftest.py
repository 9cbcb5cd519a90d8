import os
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("JWT_AUDIENCE", "authenticated")
os.environ.setdefault("TIMEZONE", "America/New_York")

import jwt  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from app.config import settings  # noqa: E402
from app.db import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.models import UserProfile, UserRole  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/portal.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def make_token(user_id: str, *, expires_in: timedelta = timedelta(hours=1), secret: str | None = None) -> str:
    claims = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "exp": datetime.now(UTC) + expires_in,
    }
    return jwt.encode(claims, secret or settings.jwt_secret, algorithm="HS256")


@pytest.fixture
def auth_headers():
    def _headers(user: UserProfile) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user.id)}"}

    return _headers


@pytest.fixture
def create_user(session_maker: async_sessionmaker[AsyncSession]):
    async def _create(
        user_id: str,
        role: UserRole,
        *,
        client_id: str | None = None,
        company_name: str | None = None,
        is_active: bool = True,
    ) -> UserProfile:
        user = UserProfile(
            id=user_id,
            email=f"{user_id}@example.com",
            full_name=user_id.replace("-", " ").title(),
            role=role,
            client_id=client_id,
            company_name=company_name,
            is_active=is_active,
        )
        async with session_maker() as session:
            session.add(user)
            await session.commit()
        return user

    return _create


@pytest.fixture
async def admin(create_user) -> UserProfile:
    return await create_user("admin-1", UserRole.ADMIN)


@pytest.fixture
async def client_user(create_user) -> UserProfile:
    return await create_user("client-1", UserRole.CLIENT, client_id="acme")


@pytest.fixture
async def subcontractor(create_user) -> UserProfile:
    return await create_user("sub-1", UserRole.SUBCONTRACTOR, company_name="Sparkle Cleaning")
