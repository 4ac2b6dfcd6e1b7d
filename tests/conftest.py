"""Test fixtures — async test client, test database, factories."""
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from houselyzer.database import Base
from houselyzer.api.deps import get_db, get_importer, verify_api_key
from houselyzer.main import app
from houselyzer.services.importer_service import PropertyImporter
import houselyzer.models  # noqa: F401


TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
test_session_factory = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables and yield a test database session."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_factory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Yield an HTTP test client with the test DB injected and auth bypassed.

    Every request gets its own session, as in production. Imports run against
    an unconfigured importer, so they use template extraction.
    """

    async def override_get_db():
        async with test_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_importer] = lambda: PropertyImporter()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def make_listing_payload(**overrides) -> dict:
    """Create a valid listing creation payload."""
    defaults = {
        "title": "Two-bedroom apartment near the park",
        "address": "123 Main St, Springfield",
        "price": 450000,
        "currency": "USD",
        "bedrooms": 2,
        "bathrooms": 1,
        "sqft": 1000,
        "year_built": 2015,
        "property_type": "apartment",
        "image_url": "https://example.com/photo.jpg",
        "description": "Bright apartment with a balcony.",
        "neighborhood": "Downtown",
        "listing_agent": "Jane Agent",
        "days_on_market": 12,
        "features": ["Balcony", "Elevator"],
    }
    defaults.update(overrides)
    return defaults
