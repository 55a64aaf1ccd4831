import os
import shutil
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time, so pick the test profile first.
# The default SQLite file lives in a throwaway directory outside the checkout.
TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="fleet-asset-tests-"))
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{TEST_DB_DIR / 'fleet_asset_test.db'}",
)
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import db as project_db
import db_models  # noqa: F401
from config.database import get_sync_database_url
from db_base import Base
from main import app as fastapi_app

# NullPool: each session opens its own connection and nothing outlives a test
fleet_engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
FleetTestSession = async_sessionmaker(
    bind=fleet_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
def remove_test_db_dir():
    yield
    fleet_engine.sync_engine.dispose()
    shutil.rmtree(TEST_DB_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def fleet_tables():
    """Empty fleet tables for every test. Point TEST_DATABASE_URL at a throwaway database."""
    schema_engine = create_engine(get_sync_database_url(TEST_DATABASE_URL))
    Base.metadata.drop_all(bind=schema_engine)
    Base.metadata.create_all(bind=schema_engine)
    yield
    Base.metadata.drop_all(bind=schema_engine)
    schema_engine.dispose()


@pytest.fixture
async def db_session():
    async with FleetTestSession() as session:
        yield session


@pytest.fixture
async def async_client():
    async def session_per_request():
        async with FleetTestSession() as session:
            yield session

    fastapi_app.dependency_overrides[project_db.get_session] = session_per_request
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def user_id():
    return "11111111-1111-1111-1111-111111111111"


@pytest.fixture
def service_url():
    def _url(operation: str) -> str:
        return f"/api/v1/tractor-service/{operation}"
    return _url


@pytest.fixture
def create_tractor(async_client, service_url, user_id):
    """Async factory: POST /create with sensible defaults, return the JSON body."""
    async def _create(**fields):
        payload = {"truckNumber": "T-100", "assignedPlant": "P01", **fields, "userId": user_id}
        resp = await async_client.post(service_url("create"), json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _create
