# tests/conftest.py
import os
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from loguru import logger
from mongomock_motor import AsyncMongoMockClient

# Keep test output quiet; must be set before the settings module is imported
os.environ.setdefault("LOG_LEVEL", "WARNING")

from avocado_api.core.database import get_database  # noqa: E402
from avocado_api.main import app  # noqa: E402
from avocado_api.modules.sales.models import SalesRecordCreateInternal  # noqa: E402
from avocado_api.modules.sales.repository import SalesRecordRepository  # noqa: E402

SAMPLE_RECORDS = [
    {"id": 1, "date": "2020-01-01", "region": "USA", "averagePrice": 1.5, "totalVolume": 100, "smallBags": 50, "largeBags": 30, "xLargeBags": 20},
    {"id": 2, "date": "2020-01-01", "region": "Albany", "averagePrice": 1.33, "totalVolume": 64236.62, "smallBags": 8603.62, "largeBags": 93.25, "xLargeBags": 1.5},
    {"id": 3, "date": "2020-01-08", "region": "USA", "averagePrice": 1.41, "totalVolume": 120.5, "smallBags": 60, "largeBags": 40, "xLargeBags": 20.5},
]


@pytest.fixture
def record_payload() -> dict:
    """A complete, valid create payload for an id not in SAMPLE_RECORDS."""
    return {
        "id": 42,
        "date": "2020-02-02",
        "region": "Boston",
        "averagePrice": 1.07,
        "totalVolume": 504933.2,
        "smallBags": 38209.43,
        "largeBags": 3214.06,
        "xLargeBags": 12,
    }


@pytest_asyncio.fixture(scope="function")
async def db_client():
    client = AsyncMongoMockClient()
    db = client[f"test_db_{os.urandom(4).hex()}"]
    await SalesRecordRepository(db).create_indexes()
    yield db


@pytest.fixture
def repository(db_client) -> SalesRecordRepository:
    return SalesRecordRepository(db_client)


@pytest_asyncio.fixture
async def seeded_repository(repository: SalesRecordRepository) -> SalesRecordRepository:
    await repository.insert_many([SalesRecordCreateInternal.model_validate(r) for r in SAMPLE_RECORDS])
    return repository


@pytest_asyncio.fixture(scope="function")
async def test_client(db_client) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_database():
        return db_client

    app.dependency_overrides[get_database] = override_get_database
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def captured_logs() -> List[str]:
    """Messages loguru emits at WARNING and above while the test runs."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def sample_records() -> List[dict]:
    """The records seeded_repository inserts, as plain dicts."""
    return [dict(r) for r in SAMPLE_RECORDS]
