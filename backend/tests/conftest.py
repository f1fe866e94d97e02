"""
EstateHub Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures.
How:   Every test that needs storage gets a fresh in-memory SQLite database,
       initialized through the real `Database` object so the production
       session dependency is exercised unchanged.

Fixture Hierarchy (all function-scoped):
    database ─┬── db_session ── registered_user
              └── test_client
    residency_payload: request body for POST /residency/create
"""

import os

# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ENVIRONMENT"] = "development"
os.environ["CONFLICT_RETRY_MIN_WAIT"] = "0"
os.environ["CONFLICT_RETRY_MAX_WAIT"] = "0"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import db  # noqa: E402
from app.schemas.user import UserRegister  # noqa: E402
from app.services.user_service import user_service  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
OWNER_EMAIL = "owner@example.com"


@pytest_asyncio.fixture
async def database():
    """Fresh schema per test; the engine is disposed afterwards."""
    db.init(TEST_DATABASE_URL)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """
    A session for calling services directly.

    Services only flush; tests commit when a later rollback must not undo
    the setup.
    """
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def registered_user(db_session):
    """A committed user with empty bookings and favorites."""
    user, _ = await user_service.register_user(
        db_session, UserRegister(email=OWNER_EMAIL, name="Olive Owner")
    )
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient wired to the app through ASGITransport.

    ASGITransport does not run the lifespan; the `database` fixture has
    already initialized the engine the request sessions will use.
    """
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def residency_payload():
    """Body for POST /residency/create, in the client's camelCase envelope."""
    return {
        "data": {
            "title": "Sunny loft",
            "description": "Two bedrooms near the river",
            "price": 1200,
            "address": "12 River Street",
            "city": "Lisbon",
            "country": "Portugal",
            "image": "https://img.example.com/loft.jpg",
            "facilities": {"bedrooms": 2, "bathrooms": 1, "parkings": 0},
            "userEmail": OWNER_EMAIL,
        }
    }
