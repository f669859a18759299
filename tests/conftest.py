"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test settings before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leave_management.auth.models import User
from leave_management.auth.service import hash_password
from leave_management.common.constants import LeaveStatus, LeaveType, UserRole
from leave_management.config import settings
from leave_management.database import Base, get_db
from leave_management.leave.models import Leave
from leave_management.main import create_app


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from leave_management.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_user(
    *,
    username: str = "priya_sharma",
    email: str = "priya.sharma@company.com",
    password: str = "employee123",
    role: UserRole = UserRole.employee,
) -> dict:
    return dict(
        username=username,
        email=email,
        password=hash_password(password),
        role=role,
    )


def _make_leave(
    *,
    user_id: int,
    employee_name: str = "Priya Sharma",
    leave_type: LeaveType = LeaveType.annual,
    from_date: date = date(2024, 7, 15),
    to_date: date = date(2024, 7, 19),
    reason: str = "Family wedding celebration in hometown",
    status: LeaveStatus = LeaveStatus.pending,
    created_at: datetime | None = None,
) -> dict:
    stamp = created_at or datetime.now(timezone.utc)
    return dict(
        user_id=user_id,
        employee_name=employee_name,
        leave_type=leave_type,
        from_date=from_date,
        to_date=to_date,
        reason=reason,
        status=status,
        created_at=stamp,
        updated_at=stamp,
    )


async def seed_user(db: AsyncSession, **kwargs) -> User:
    user = User(**_make_user(**kwargs))
    db.add(user)
    await db.commit()
    return user


async def seed_leave(db: AsyncSession, **kwargs) -> Leave:
    leave = Leave(**_make_leave(**kwargs))
    db.add(leave)
    await db.commit()
    return leave


@pytest.fixture
async def employee(db) -> User:
    """An employee account (password ``employee123``)."""
    return await seed_user(db)


@pytest.fixture
async def other_employee(db) -> User:
    return await seed_user(
        db, username="arjun_patel", email="arjun.patel@company.com",
    )


@pytest.fixture
async def admin(db) -> User:
    """An admin account (password ``admin123``)."""
    return await seed_user(
        db,
        username="rajesh_kumar",
        email="rajesh.kumar@company.com",
        password="admin123",
        role=UserRole.admin,
    )


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: int,
    email: str = "priya.sharma@company.com",
    role: UserRole = UserRole.employee,
    expired: bool = False,
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(user_id),
        "userId": user_id,
        "email": email,
        "role": role.value,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def headers_for(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def employee_headers(employee) -> dict[str, str]:
    return headers_for(employee)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return headers_for(admin)
