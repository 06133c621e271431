"""
Polystore CRUD API — FastAPI Dependencies
===========================================

What:  Dependency providers that hand the connection managers to routes.
Why:   Backends are constructed once (by create_app or the lifespan) and
       kept on app.state; routes never import a global client, so tests can
       inject fakes through create_app() or app.dependency_overrides.
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from crud_api.database import RelationalStore
from crud_api.document_store import DocumentStore
from crud_api.exceptions import DocumentStoreError
from crud_api.object_storage import ObjectStorage


def get_document_store(request: Request) -> DocumentStore:
    store = request.app.state.document_store
    if store is None:
        # The client could not be built at startup (bad MONGO_URI)
        raise DocumentStoreError("MongoDB is not available")
    return store


def get_relational_store(request: Request) -> RelationalStore:
    return request.app.state.relational_store


def get_object_storage(request: Request) -> ObjectStorage:
    return request.app.state.object_storage


async def get_db_session(
    store: RelationalStore = Depends(get_relational_store),
) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Teardown runs after the response has started, so it must not be where a
    write becomes durable: ProductService commits its own writes. Here the
    session is rolled back when the handler raises and always returned to
    the pool.
    """
    async with store.session() as session:
        yield session
