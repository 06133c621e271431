"""
Polystore CRUD API — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Each backend gets the cheapest faithful stand-in: a mocked MongoDB
       collection, a real SQLAlchemy engine on SQLite, and a moto-backed S3.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_users_collection: AsyncMock collection (find_one, insert_one, ...)
    ├── mock_document_store: DocumentStore around a mock client
    ├── relational_store: RelationalStore on a fresh SQLite file (no tables)
    ├── product_store: relational_store with the produto table created
    ├── object_storage: ObjectStorage on moto's in-memory S3 with TEST_BUCKET
    ├── app: create_app() with the three backends injected
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any crud_api imports
# Why: Prevents tests from reaching a real MySQL, MongoDB or AWS account
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["MONGO_URI"] = "mongodb://localhost:27017/crud_api_test"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ.update({
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "test",
    "AWS_SECRET_ACCESS_KEY": "test",
})

import boto3  # noqa: E402
from moto import mock_aws  # noqa: E402

from crud_api.config import Settings  # noqa: E402
from crud_api.database import RelationalStore  # noqa: E402
from crud_api.document_store import DocumentStore  # noqa: E402
from crud_api.object_storage import ObjectStorage  # noqa: E402

TEST_BUCKET = "test-bucket"


# ══════════════════════════════════════════════════════════════════════════
# Document Store (MongoDB)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_users_collection():
    """
    Provides a mock `usuarios` collection.

    What:    MagicMock with the async collection methods the service calls.
    Why:     Tests should not require a running MongoDB.
    How:     Defaults describe an empty collection; tests override return
             values or side effects per case.

    Usage:
        async def test_get_user(mock_users_collection, mock_document_store):
            mock_users_collection.find_one.return_value = {"_id": oid, ...}
    """
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))

    # find() is synchronous and returns a cursor; to_list() is awaited
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[])
    collection.find = MagicMock(return_value=cursor)
    return collection


@pytest.fixture
def mock_document_store(mock_users_collection):
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1.0})
    client.close = AsyncMock()
    store = DocumentStore(client, database_name="crud_api_test")
    store.users = mock_users_collection
    return store


# ══════════════════════════════════════════════════════════════════════════
# Relational Store (SQLite standing in for MySQL)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def relational_store(tmp_path) -> AsyncGenerator[RelationalStore, None]:
    """
    Provides a RelationalStore on an empty SQLite database.

    The file lives in tmp_path so every connection of the engine sees the
    same data, and every test starts without the produto table.
    """
    config = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    store = RelationalStore.from_settings(config)
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def product_store(relational_store) -> RelationalStore:
    await relational_store.init_schema()
    return relational_store


# ══════════════════════════════════════════════════════════════════════════
# Object Storage (moto S3)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def object_storage():
    """Create a mock S3 with one empty bucket for testing."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=TEST_BUCKET)
        yield ObjectStorage(client)


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(mock_document_store, product_store, object_storage):
    """
    The FastAPI app wired to the test backends.

    ASGITransport does not run the lifespan, so the backends are injected
    through create_app() instead of being built from settings.
    """
    from crud_api.main import create_app

    return create_app(
        document_store=mock_document_store,
        relational_store=product_store,
        object_storage=object_storage,
    )


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_list_users(test_client):
            response = await test_client.get("/usuarios")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
