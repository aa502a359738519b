"""
Shared test fixtures for the staff attendance test suite.

Async SQLite (aiosqlite) per test, a frozen clock, an in-memory blob store and
JWTs minted with the real signing helper.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["LOCAL_UTC_OFFSET"] = "+05:30"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_blob_store, get_db, get_now
from app.db.base import Base
from app.main import app
from app.models.staff import Staff
from helpers import FRANCHISE_ID, STAFF_ID, FakeBlobStore, FrozenClock, local


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(local(9, 0))


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
async def async_client(session_factory, clock, blob_store) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_now] = lambda: clock.now
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_staff(db_session: AsyncSession):
    """Insert a staff directory entry (09:00-18:00 shift unless told otherwise)."""

    async def _make(
        staff_id: str = STAFF_ID,
        *,
        name: str = "Asha Rao",
        shift_start: str | None = "09:00",
        shift_end: str | None = "18:00",
        score: int | None = 100,
        score_last_reset: str | None = "2024-06",
        franchise_id: str | None = FRANCHISE_ID,
        role: str = "FRANCHISE_STAFF",
    ) -> Staff:
        staff = Staff(
            id=staff_id,
            name=name,
            employee_id=f"EMP-{staff_id[-3:]}",
            role=role,
            franchise_id=franchise_id,
            franchise_name="Central Kitchen",
            shift_start_time=shift_start,
            shift_end_time=shift_end,
            score=score,
            score_last_reset=score_last_reset,
        )
        db_session.add(staff)
        await db_session.commit()
        return staff

    return _make
