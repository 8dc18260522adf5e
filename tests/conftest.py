"""Test configuration and fixtures."""

from datetime import date, datetime, time, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from collabmarket.database import get_db, init_db
from collabmarket.models import BUSINESS_OWNER, CONTENT_CREATOR, JobPosting, Profile
from collabmarket.schemas.job_posting import JobListing
from collabmarket.session import Viewer

OWNER_USER_ID = "user-owner"
CREATOR_USER_ID = "user-creator"
OTHER_OWNER_USER_ID = "user-owner-2"


def make_listing(**overrides) -> JobListing:
    """Build a JobListing with sensible defaults."""
    values = {
        "id": uuid4(),
        "title": "Product video",
        "description": "Short product review for our new shoes",
        "has_deadline": False,
        "deadline_date": None,
        "deadline_time": None,
        "created_at": datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        "profile_id": uuid4(),
        "slug": f"product-video-{uuid4().hex[:6]}",
        "user_id": OWNER_USER_ID,
        "username": "shoeshop",
        "first_name": "Ann",
        "last_name": "Lee",
        "profile_photo": None,
        "city": "Taipei",
        "country": "Taiwan",
        "user_type": BUSINESS_OWNER,
        "is_saved": False,
    }
    values.update(overrides)
    return JobListing(**values)


@pytest.fixture
def listing_factory():
    """Factory for in-memory listings."""
    return make_listing


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    """Database session for a single test."""
    async with session_factory() as session:
        yield session


async def add_profile(
    db: AsyncSession,
    user_id: str,
    user_type: str,
    username: str,
    **overrides,
) -> Profile:
    """Insert a profile row and return it."""
    values = {
        "first_name": username.capitalize(),
        "last_name": "Tester",
        "city": "Taipei",
        "country": "Taiwan",
    }
    values.update(overrides)
    profile = Profile(user_id=user_id, user_type=user_type, username=username, **values)
    db.add(profile)
    await db.commit()
    return profile


async def add_posting(db: AsyncSession, profile: Profile, **overrides) -> JobPosting:
    """Insert a job posting owned by profile and return it."""
    values = {
        "title": "Need a Logo",
        "description": "Design a logo for our coffee shop",
        "has_deadline": False,
        "slug": f"need-a-logo-{uuid4().hex[:6]}",
    }
    values.update(overrides)
    posting = JobPosting(profile=profile, **values)
    db.add(posting)
    await db.commit()
    return posting


@pytest_asyncio.fixture
async def owner(db) -> Profile:
    return await add_profile(db, OWNER_USER_ID, BUSINESS_OWNER, "coffeeshop")


@pytest_asyncio.fixture
async def other_owner(db) -> Profile:
    return await add_profile(
        db, OTHER_OWNER_USER_ID, BUSINESS_OWNER, "bakery", city="Osaka", country="Japan"
    )


@pytest_asyncio.fixture
async def creator(db) -> Profile:
    return await add_profile(db, CREATOR_USER_ID, CONTENT_CREATOR, "vlogger")


@pytest.fixture
def owner_viewer(owner) -> Viewer:
    return Viewer.from_profile(owner)


@pytest.fixture
def other_owner_viewer(other_owner) -> Viewer:
    return Viewer.from_profile(other_owner)


@pytest.fixture
def creator_viewer(creator) -> Viewer:
    return Viewer.from_profile(creator)


@pytest_asyncio.fixture
async def posting(db, owner) -> JobPosting:
    """Open posting by the business owner."""
    return await add_posting(db, owner)


@pytest_asyncio.fixture
async def expired_posting(db, owner) -> JobPosting:
    """Posting whose deadline passed long ago."""
    return await add_posting(
        db,
        owner,
        title="Holiday campaign",
        slug="holiday-campaign-abc123",
        has_deadline=True,
        deadline_date=date(2020, 1, 1),
        deadline_time=time(18, 0),
    )


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def client(tmp_path):
    """TestClient backed by a throwaway SQLite file.

    Every request opens its own connection, so the database can be used
    from the event loop TestClient runs each request on.
    """
    from main import app

    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    tables_ready = False

    async def override_get_db():
        nonlocal tables_ready
        if not tables_ready:
            await init_db(bind=test_engine)
            tables_ready = True
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user_id: str) -> dict:
    """Headers identifying the caller."""
    return {"X-User-Id": user_id}


def onboard(client: TestClient, user_id: str, user_type: str, username: str, **fields) -> dict:
    """Create a profile through the API and return its JSON."""
    payload = {
        "user_type": user_type,
        "username": username,
        "first_name": username.capitalize(),
        "last_name": "Tester",
        "city": "Taipei",
        "country": "Taiwan",
    }
    payload.update(fields)
    response = client.post("/api/v1/profiles", json=payload, headers=auth(user_id))
    assert response.status_code == 201, response.text
    return response.json()
