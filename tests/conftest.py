"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; provide test values before importing fitclub
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STRAVA_CLIENT_ID", "12345")
os.environ.setdefault("STRAVA_CLIENT_SECRET", "test-secret")
os.environ.setdefault("STRAVA_REDIRECT_URI", "http://localhost:8000/auth/callback")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("ENVIRONMENT", "local")

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from itertools import count

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fitclub.activities.models import Activity
from fitclub.athletes.models import Athlete
from fitclub.core.database import Base
from fitclub.stats.schemas import ActivityRecord, AthleteRecord
from fitclub.sync.models import SyncLog  # noqa: F401 - registers the table

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

_ids = count(1000)


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """Create async engine for testing."""
    # File-backed so each session gets its own connection; a StaticPool
    # connection shared with background sync tasks interleaves transactions
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path}/test.db",
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def async_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for testing."""
    async with session_maker() as session:
        yield session


def make_activity(
    athlete_id: int = 1,
    start: datetime = datetime(2024, 3, 12, 7, 30),
    activity_type: str = "Run",
    **overrides,
) -> ActivityRecord:
    """Build an ActivityRecord with sensible defaults."""
    data = {
        "id": next(_ids),
        "athlete_id": athlete_id,
        "name": f"{activity_type} activity",
        "type": activity_type,
        "distance": 5000.0,
        "moving_time": 1800,
        "elapsed_time": 1900,
        "total_elevation_gain": 0.0,
        "start_date_local": start,
    }
    data.update(overrides)
    return ActivityRecord(**data)


def make_athlete(athlete_id: int, firstname: str = "Test", **overrides) -> AthleteRecord:
    return AthleteRecord(id=athlete_id, firstname=firstname, lastname=f"#{athlete_id}", **overrides)


def activity_row(record: ActivityRecord) -> Activity:
    """ORM row for a record, with UTC start equal to the local one."""
    return Activity(
        id=record.id,
        athlete_id=record.athlete_id,
        name=record.name,
        type=record.type,
        distance=record.distance,
        moving_time=record.moving_time,
        elapsed_time=record.elapsed_time,
        total_elevation_gain=record.total_elevation_gain,
        average_speed=record.average_speed,
        max_speed=record.max_speed,
        average_heartrate=record.average_heartrate,
        max_heartrate=record.max_heartrate,
        calories=record.calories,
        start_date=record.start_date_local.replace(tzinfo=timezone.utc),
        start_date_local=record.start_date_local,
    )


@pytest.fixture
def activity_factory():
    return make_activity


@pytest_asyncio.fixture
async def add_athlete(async_session):
    """Insert a connected athlete."""

    async def _add(athlete_id: int, firstname: str = "Test", **overrides) -> Athlete:
        data = {
            "id": athlete_id,
            "firstname": firstname,
            "lastname": f"#{athlete_id}",
            "access_token": f"access-{athlete_id}",
            "refresh_token": f"refresh-{athlete_id}",
            "token_expires_at": 9999999999,
            "authorized": True,
        }
        data.update(overrides)
        athlete = Athlete(**data)
        async_session.add(athlete)
        await async_session.commit()
        await async_session.refresh(athlete)
        return athlete

    return _add


@pytest_asyncio.fixture
async def add_activities(async_session):
    """Insert activities built with ``make_activity``."""

    async def _add(*records: ActivityRecord) -> list[ActivityRecord]:
        async_session.add_all([activity_row(r) for r in records])
        await async_session.commit()
        return list(records)

    return _add


@pytest.fixture
def athlete_factory():
    return make_athlete
