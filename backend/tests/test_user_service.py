"""
Polystore CRUD API — User Service Unit Tests
===============================================

What:  Tests for UserService against a mocked `usuarios` collection.
Why:   Not-found detection and driver error translation live here, not in
       the routes.
How:   mock_document_store / mock_users_collection from conftest.py.

What we test:
    ✅ Create returns the generated id with the stored fields
    ✅ Missing and malformed ids raise NotFoundError
    ✅ Update writes only the supplied fields
    ✅ PyMongoError becomes DocumentStoreError with normalized context
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from crud_api.exceptions import DocumentStoreError, NotFoundError
from crud_api.schemas.user import UserCreate, UserUpdate
from crud_api.services.user_service import UserService, parse_object_id


class TestParseObjectId:

    def test_valid_id(self):
        oid = ObjectId()
        assert parse_object_id(str(oid)) == oid

    def test_malformed_id_is_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            parse_object_id("not-an-object-id")
        assert exc_info.value.context["resource_id"] == "not-an-object-id"


class TestUserServiceConnection:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_connection_without_users(self, mock_document_store):
        assert await self.service.check_connection(mock_document_store) is False
        mock_document_store.client.admin.command.assert_awaited_once_with("ping")

    @pytest.mark.asyncio
    async def test_connection_with_a_user(self, mock_document_store, mock_users_collection):
        mock_users_collection.find_one.return_value = {"_id": ObjectId(), "nome": "Ana"}
        assert await self.service.check_connection(mock_document_store) is True

    @pytest.mark.asyncio
    async def test_unreachable_server(self, mock_document_store):
        mock_document_store.client.admin.command = AsyncMock(
            side_effect=ServerSelectionTimeoutError("no servers")
        )
        with pytest.raises(DocumentStoreError) as exc_info:
            await self.service.check_connection(mock_document_store)
        assert exc_info.value.context == {
            "error_type": "ServerSelectionTimeoutError",
            "backend": "mongodb",
        }


class TestUserServiceCrud:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_create_user(self, mock_document_store, mock_users_collection):
        oid = ObjectId()
        mock_users_collection.insert_one.return_value = MagicMock(inserted_id=oid)

        user = await self.service.create_user(
            mock_document_store, UserCreate(nome="Ana", email="ana@example.com")
        )

        assert user.id == str(oid)
        assert user.name == "Ana"
        assert user.email == "ana@example.com"
        mock_users_collection.insert_one.assert_awaited_once_with(
            {"nome": "Ana", "email": "ana@example.com", "_id": oid}
        )

    @pytest.mark.asyncio
    async def test_list_users(self, mock_document_store, mock_users_collection):
        docs = [
            {"_id": ObjectId(), "nome": "Ana", "email": "ana@example.com"},
            {"_id": ObjectId(), "nome": "Bruno", "email": "bruno@example.com"},
        ]
        mock_users_collection.find.return_value.to_list.return_value = docs

        users = await self.service.list_users(mock_document_store)

        assert [u.name for u in users] == ["Ana", "Bruno"]
        assert users[0].id == str(docs[0]["_id"])

    @pytest.mark.asyncio
    async def test_get_missing_user(self, mock_document_store):
        with pytest.raises(NotFoundError):
            await self.service.get_user(mock_document_store, str(ObjectId()))

    @pytest.mark.asyncio
    async def test_get_malformed_id_skips_query(self, mock_document_store, mock_users_collection):
        with pytest.raises(NotFoundError):
            await self.service.get_user(mock_document_store, "123")
        mock_users_collection.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_sets_only_supplied_fields(
        self, mock_document_store, mock_users_collection
    ):
        oid = ObjectId()
        mock_users_collection.find_one_and_update.return_value = {
            "_id": oid,
            "nome": "Ana",
            "email": "new@example.com",
        }

        user = await self.service.update_user(
            mock_document_store, str(oid), UserUpdate(email="new@example.com")
        )

        assert user.email == "new@example.com"
        assert user.name == "Ana"
        mock_users_collection.find_one_and_update.assert_awaited_once_with(
            {"_id": oid},
            {"$set": {"email": "new@example.com"}},
            return_document=ReturnDocument.AFTER,
        )

    @pytest.mark.asyncio
    async def test_update_with_empty_body_reads_document(
        self, mock_document_store, mock_users_collection
    ):
        oid = ObjectId()
        mock_users_collection.find_one.return_value = {"_id": oid, "nome": "Ana"}

        user = await self.service.update_user(mock_document_store, str(oid), UserUpdate())

        assert user.name == "Ana"
        mock_users_collection.find_one_and_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_missing_user(self, mock_document_store):
        with pytest.raises(NotFoundError):
            await self.service.update_user(
                mock_document_store, str(ObjectId()), UserUpdate(nome="X")
            )

    @pytest.mark.asyncio
    async def test_delete_user(self, mock_document_store, mock_users_collection):
        oid = ObjectId()
        mock_users_collection.delete_one.return_value = MagicMock(deleted_count=1)

        await self.service.delete_user(mock_document_store, str(oid))

        mock_users_collection.delete_one.assert_awaited_once_with({"_id": oid})

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, mock_document_store):
        with pytest.raises(NotFoundError):
            await self.service.delete_user(mock_document_store, str(ObjectId()))

    @pytest.mark.asyncio
    async def test_driver_error_is_translated(self, mock_document_store, mock_users_collection):
        mock_users_collection.insert_one.side_effect = OperationFailure(
            "not authorized", code=13
        )

        with pytest.raises(DocumentStoreError) as exc_info:
            await self.service.create_user(
                mock_document_store, UserCreate(nome="Ana", email="ana@example.com")
            )

        assert exc_info.value.status_code == 500
        assert exc_info.value.context["error_type"] == "OperationFailure"
