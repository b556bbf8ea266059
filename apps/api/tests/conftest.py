"""Shared test fixtures for the Dealflow legal API test suite."""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.dependencies import get_current_user
from app.core.config import settings
from app.core.database import Base, get_db, get_readonly_db
from app.main import app
from app.models.deals import Deal, DealEvent
from app.models.enums import (
    ConditionCategory,
    ConditionSeverity,
    ConditionStatus,
    LegalStage,
    UserRole,
)
from app.models.legal import LegalCondition
from app.schemas.auth import CurrentUser

# In-memory SQLite needs a single shared connection; Postgres gets its own pool
if settings.TEST_DATABASE_URL.startswith("sqlite"):
    _test_engine = create_async_engine(
        settings.TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    _test_engine = create_async_engine(settings.TEST_DATABASE_URL)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession]:
    """Provide a DB session on a freshly created schema, dropped after each test."""
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session = AsyncSession(bind=_test_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        async with _test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


# ── Sample data ──────────────────────────────────────────────────────────────

SAMPLE_ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
SAMPLE_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
OTHER_ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000009")


def make_user(role: UserRole = UserRole.MEMBER, org_id: uuid.UUID = SAMPLE_ORG_ID) -> CurrentUser:
    return CurrentUser(
        user_id=SAMPLE_USER_ID,
        org_id=org_id,
        role=role,
        email="closer@example.com",
    )


async def create_deal(
    db: AsyncSession,
    stage: LegalStage = LegalStage.PRE_CONTRACT,
    org_id: uuid.UUID = SAMPLE_ORG_ID,
    **kwargs,
) -> Deal:
    deal = Deal(
        org_id=org_id,
        title=kwargs.pop("title", "123 Main St"),
        legal_stage=stage,
        **kwargs,
    )
    db.add(deal)
    await db.flush()
    return deal


async def add_condition(
    db: AsyncSession,
    deal: Deal,
    severity: ConditionSeverity = ConditionSeverity.BLOCKING,
    status: ConditionStatus = ConditionStatus.OPEN,
    summary: str = "Unreleased lien from prior owner",
) -> LegalCondition:
    condition = LegalCondition(
        deal_id=deal.id,
        category=ConditionCategory.LIEN,
        severity=severity,
        status=status,
        summary=summary,
    )
    db.add(condition)
    await db.flush()
    return condition


async def add_event(
    db: AsyncSession,
    deal: Deal,
    event_type: str,
    age: timedelta,
    now: datetime | None = None,
    **metadata,
) -> DealEvent:
    """Insert an event back-dated by ``age`` (bypasses the append-time clock)."""
    event = DealEvent(
        deal_id=deal.id,
        event_type=event_type,
        metadata_=metadata,
        created_at=(now or datetime.now(timezone.utc)) - age,
    )
    db.add(event)
    await db.flush()
    return event


@pytest.fixture
async def sample_deal(db: AsyncSession) -> Deal:
    return await create_deal(db, stage=LegalStage.UNDER_CONTRACT)


def _client_for(db: AsyncSession, user: CurrentUser):
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_readonly_db] = lambda: db
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _clear_overrides() -> None:
    app.dependency_overrides.pop(get_current_user, None)
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_readonly_db, None)


@pytest.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Client authenticated as a MEMBER of the sample org."""
    async with _client_for(db, make_user(UserRole.MEMBER)) as ac:
        yield ac
    _clear_overrides()


@pytest.fixture
async def manager_client(db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    async with _client_for(db, make_user(UserRole.MANAGER)) as ac:
        yield ac
    _clear_overrides()


@pytest.fixture
async def viewer_client(db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    async with _client_for(db, make_user(UserRole.VIEWER)) as ac:
        yield ac
    _clear_overrides()


@pytest.fixture
async def anonymous_client() -> AsyncGenerator[AsyncClient]:
    """Client with no overrides: real bearer-token verification."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
