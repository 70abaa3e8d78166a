"""
Test configuration and fixtures for the waitlist API.

Every test gets its own SQLite database file so signup order, ranks and
counts start from a clean slate.
"""

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.main import create_app
from app.platform.config import Settings
from app.platform.db.session import DataStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        APP_NAME="Referral Waitlist Test",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        AUTO_CREATE_TABLES=True,
        PUBLIC_BASE_URL="http://test",
        LEADERBOARD_LIMIT=5,
        MAIL_ENABLED=False,
        LOG_DIR=str(tmp_path / "logs"),
    )


@pytest.fixture
def client(settings) -> Generator[TestClient, None, None]:
    """
    Test client bound to a fresh app; entering the context runs the lifespan,
    which builds the data store and creates the tables.
    """
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def data_store(settings) -> AsyncGenerator[DataStore, None]:
    store = DataStore.from_settings(settings)
    await store.create_tables()
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def db_session(data_store) -> AsyncGenerator[AsyncSession, None]:
    async with data_store.sessionmaker() as session:
        yield session


@pytest.fixture
def signup_user(client):
    """Posts to /api/signup and returns the response."""

    def _signup(name: str, email: str, referred_by_code: str | None = None):
        payload = {"name": name, "email": email}
        if referred_by_code is not None:
            payload["referredByCode"] = referred_by_code
        return client.post("/api/signup", json=payload)

    return _signup
