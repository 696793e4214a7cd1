"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavedesk.auth.service import create_access_token
from leavedesk.common.constants import ActorRole
from leavedesk.database import Base, get_db
from leavedesk.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import leavedesk.actors.models  # noqa: F401
import leavedesk.academic_calendar.models  # noqa: F401
import leavedesk.common.audit  # noqa: F401
import leavedesk.leave.models  # noqa: F401

from leavedesk.academic_calendar.models import CalendarEvent
from leavedesk.actors.models import Actor

# ── SQLite compat: compile PG-specific types to TEXT/BLOB ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Register PG-compatible functions for SQLite
@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() as a SQLite custom function."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
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
def _disable_rate_limiter():
    """Rate limits are exercised explicitly; keep them out of other tests."""
    from leavedesk.common.rate_limit import limiter

    was_enabled = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = was_enabled


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

def _make_actor(
    *,
    role: ActorRole = ActorRole.requester,
    email: Optional[str] = None,
    full_name: str = "Test User",
    department: Optional[str] = "CSE",
    section: Optional[str] = "A",
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        email=email or f"{role.value}.{uuid.uuid4().hex[:8]}@college.edu",
        full_name=full_name,
        role=role,
        department=department,
        section=section,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


def _make_event(
    *,
    title: str = "Mid-term Exam",
    start_date: date = date(2024, 3, 11),
    end_date: Optional[date] = None,
    event_type: str = "exam",
    created_by: Optional[uuid.UUID] = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        title=title,
        start_date=start_date,
        end_date=end_date or start_date,
        event_type=event_type,
        created_by=created_by,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def seed_actor(db: AsyncSession, **kwargs) -> Actor:
    actor = Actor(**_make_actor(**kwargs))
    db.add(actor)
    await db.flush()
    return actor


async def seed_event(db: AsyncSession, **kwargs) -> CalendarEvent:
    ev = CalendarEvent(**_make_event(**kwargs))
    db.add(ev)
    await db.flush()
    return ev


@pytest.fixture
async def student(db) -> Actor:
    return await seed_actor(db, full_name="Arun Student")


@pytest.fixture
async def advisor(db) -> Actor:
    return await seed_actor(
        db, role=ActorRole.first_line_reviewer, full_name="Meera Advisor",
    )


@pytest.fixture
async def hod(db) -> Actor:
    return await seed_actor(
        db, role=ActorRole.final_reviewer, full_name="Ravi HOD", section=None,
    )


# ── Auth helpers ────────────────────────────────────────────────────

def auth_headers(actor: Actor, *, expired: bool = False) -> dict[str, str]:
    """Bearer headers for *actor*."""
    expires_in = timedelta(hours=-1) if expired else None
    token = create_access_token(actor.id, expires_in=expires_in)
    return {"Authorization": f"Bearer {token}"}
