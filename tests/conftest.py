"""Pytest configuration and fixtures."""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from app.main import app
from app.config import settings


@pytest_asyncio.fixture
async def test_db():
    """
    Provide a clean test database.

    Skips the test when no MongoDB server is reachable.
    """
    test_client = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=2000)
    test_db_name = f"{settings.mongodb_db_name}_test"

    try:
        await test_client.admin.command("ping")
    except PyMongoError:
        test_client.close()
        pytest.skip("MongoDB is not reachable")

    yield test_client[test_db_name]

    # Cleanup: drop test database
    await test_client.drop_database(test_db_name)
    test_client.close()


@pytest_asyncio.fixture
async def app_client(test_db):
    """
    Create a test client bound to the test database.

    This fixture:
    - Points the app at the test database
    - Yields an async HTTP client for testing
    - Restores the original database afterwards
    """
    from app.database import database
    original_db = database.db
    database.db = test_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    database.db = original_db
