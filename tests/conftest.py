"""Shared fixtures: one throwaway SQLite file per test, a controllable clock, an API client."""

import os

# Must be set before crm_api.core.config is imported.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["BACKGROUND_JOBS_ENABLED"] = "false"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

import crm_api.domain  # noqa: F401  register all models
from crm_api.core.config import settings
from crm_api.db.base import Base, build_session_factory, get_db
from crm_api.domain.company import Company
from crm_api.domain.enums import UserRole
from crm_api.domain.user import User
from crm_api.main import create_app

CLIENT_ID = settings.default_client_id
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "crm_test.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path


@pytest.fixture
def session_factory(db_path):
    # NullPool: every session opens its connection on the running loop.
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s
        await s.rollback()


@pytest.fixture
async def ceo(session) -> User:
    user = User(client_id=CLIENT_ID, username="ceo", email="ceo@example.com", role=UserRole.CEO.value)
    session.add(user)
    await session.flush()
    return user


@pytest.fixture
async def member(session) -> User:
    user = User(
        client_id=CLIENT_ID, username="member", email="member@example.com",
        role=UserRole.TEAM_MEMBER.value,
    )
    session.add(user)
    await session.flush()
    return user


@pytest.fixture
def make_company(session, ceo):
    """Insert a company directly (no tier/audit side effects)."""

    async def _make(
        age_days: int,
        ad_spend: str = "0",
        tier: str = "TIER_2",
        name: str = "Acme",
        now: datetime = NOW,
        created_by: str | None = None,
    ) -> Company:
        company = Company(
            client_id=CLIENT_ID,
            name=name,
            email="owner@acme.com",
            phone_number="555-0100",
            start_date=now - timedelta(days=age_days),
            ad_spend=Decimal(ad_spend),
            tier=tier,
            created_by=created_by or ceo.id,
            last_meeting_attendees=[],
        )
        session.add(company)
        await session.flush()
        return company

    return _make


@pytest.fixture
def client(session_factory):
    app = create_app()

    async def _get_db():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
