"""
Polystore CRUD API — Application Wiring Tests
================================================

What:  Lifespan behavior, request ID propagation and the docs endpoint.
How:   The lifespan context is entered directly with fake backends; no
       server, no real connections.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from httpx import ASGITransport, AsyncClient
from pymongo.errors import InvalidURI, ServerSelectionTimeoutError

from crud_api.main import create_app


def fake_backends():
    document_store = MagicMock()
    document_store.ping = AsyncMock(return_value={"ok": 1.0})
    document_store.close = AsyncMock()
    relational_store = MagicMock()
    relational_store.dispose = AsyncMock()
    return document_store, relational_store, MagicMock()


class TestLifespan:

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self):
        document_store, relational_store, object_storage = fake_backends()
        app = create_app(
            document_store=document_store,
            relational_store=relational_store,
            object_storage=object_storage,
        )

        with patch("crud_api.main.setup_logging"):
            async with app.router.lifespan_context(app):
                document_store.ping.assert_awaited_once()
                assert app.state.object_storage is object_storage

        document_store.close.assert_awaited_once()
        relational_store.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_mongo_down_does_not_abort_startup(self):
        document_store, relational_store, object_storage = fake_backends()
        document_store.ping.side_effect = ServerSelectionTimeoutError("no servers")
        app = create_app(
            document_store=document_store,
            relational_store=relational_store,
            object_storage=object_storage,
        )

        with patch("crud_api.main.setup_logging"):
            async with app.router.lifespan_context(app):
                assert app.state.document_store is document_store

        document_store.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_bad_mongo_uri_does_not_abort_startup(self):
        _, relational_store, object_storage = fake_backends()
        app = create_app(relational_store=relational_store, object_storage=object_storage)

        with patch("crud_api.main.setup_logging"), patch(
            "crud_api.main.DocumentStore.from_settings",
            side_effect=InvalidURI("Invalid URI scheme"),
        ), patch("crud_api.main.event_log") as event_log:
            async with app.router.lifespan_context(app):
                assert app.state.document_store is None

        event_log.error.assert_called_once()
        assert isinstance(event_log.error.call_args.kwargs["error"], InvalidURI)
        relational_store.dispose.assert_awaited_once()


class TestAppWiring:

    @pytest.mark.asyncio
    async def test_generated_request_id(self, test_client):
        response = await test_client.get("/produtos")

        assert response.status_code == 200
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_openapi_tags(self, test_client):
        response = await test_client.get("/openapi.json")

        assert response.status_code == 200
        tags = [tag["name"] for tag in response.json()["tags"]]
        assert tags == ["CRUD MongoDb", "CRUD MySQL", "Buckets"]

    @pytest.mark.asyncio
    async def test_cors_preflight(self, test_client):
        response = await test_client.options(
            "/usuarios",
            headers={
                "Origin": "http://frontend.example",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_users_without_mongo_client(self, product_store, object_storage):
        app = create_app(relational_store=product_store, object_storage=object_storage)

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/usuarios")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "backend_failure"
        assert body["details"] == {"backend": "mongodb"}

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id(self, app):
        @app.get("/explode")
        async def explode():
            raise RuntimeError("boom")

        # Starlette re-raises after sending the 500; the client only needs the response
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/explode", headers={"X-Request-ID": "trace-42"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "trace-42"
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "trace-42"
        assert "boom" not in response.text

    @pytest.mark.asyncio
    async def test_oversized_request_id_is_replaced(self, test_client):
        response = await test_client.get("/produtos", headers={"X-Request-ID": "x" * 200})

        assert response.status_code == 200
        assert len(response.headers["X-Request-ID"]) == 8
