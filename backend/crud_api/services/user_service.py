"""
Polystore CRUD API — User Service (Document Store)
====================================================

What:  CRUD operations on user documents in MongoDB.
Why:   Keeps driver calls and error translation out of the route handlers.
How:   Each method performs one call on the `usuarios` collection of the
       injected DocumentStore and maps the result to a UserResponse.
Who:   Called by crud_api.routes.users.

Error Translation:
    None / deleted_count == 0   → NotFoundError   (404)
    Malformed ObjectId          → NotFoundError   (404): no stored user can have it
    PyMongoError                → DocumentStoreError (500)
"""

import logging
from typing import List

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from crud_api.document_store import DocumentStore
from crud_api.exceptions import DocumentStoreError, NotFoundError
from crud_api.schemas.user import UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)


def parse_object_id(user_id: str) -> ObjectId:
    """Convert a path id to an ObjectId; malformed ids are simply absent."""
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        raise NotFoundError(resource="user", resource_id=user_id)


class UserService:
    """
    Business logic layer for user documents.

    Stateless: the DocumentStore is passed to every call, so tests can hand
    in a store built around a mock client.
    """

    async def check_connection(self, store: DocumentStore) -> bool:
        """
        Ping the server and read one document.

        Returns:
            True when at least one user exists.

        Raises:
            DocumentStoreError: Server unreachable or query failed
        """
        try:
            await store.ping()
            user = await store.users.find_one()
        except PyMongoError as e:
            raise DocumentStoreError.from_exception("Could not connect to MongoDB", e)
        return user is not None

    async def create_user(self, store: DocumentStore, data: UserCreate) -> UserResponse:
        document = data.model_dump(by_alias=True)
        try:
            result = await store.users.insert_one(document)
        except PyMongoError as e:
            raise DocumentStoreError.from_exception("Could not create the user", e)
        document["_id"] = result.inserted_id
        logger.debug("User %s inserted", result.inserted_id)
        return UserResponse.from_document(document)

    async def list_users(self, store: DocumentStore) -> List[UserResponse]:
        try:
            documents = await store.users.find().to_list(length=None)
        except PyMongoError as e:
            raise DocumentStoreError.from_exception("Could not retrieve users", e)
        return [UserResponse.from_document(doc) for doc in documents]

    async def get_user(self, store: DocumentStore, user_id: str) -> UserResponse:
        oid = parse_object_id(user_id)
        try:
            document = await store.users.find_one({"_id": oid})
        except PyMongoError as e:
            raise DocumentStoreError.from_exception("Could not retrieve the user", e)
        if document is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserResponse.from_document(document)

    async def update_user(
        self, store: DocumentStore, user_id: str, data: UserUpdate
    ) -> UserResponse:
        """
        Replace the supplied fields only and return the updated document.

        An empty body is not an error: MongoDB rejects an empty $set, so the
        stored document is read and returned unchanged.
        """
        oid = parse_object_id(user_id)
        changes = data.to_document()
        try:
            if changes:
                document = await store.users.find_one_and_update(
                    {"_id": oid},
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                document = await store.users.find_one({"_id": oid})
        except PyMongoError as e:
            raise DocumentStoreError.from_exception("Could not update the user", e)
        if document is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserResponse.from_document(document)

    async def delete_user(self, store: DocumentStore, user_id: str) -> None:
        oid = parse_object_id(user_id)
        try:
            result = await store.users.delete_one({"_id": oid})
        except PyMongoError as e:
            raise DocumentStoreError.from_exception("Could not remove the user", e)
        if result.deleted_count == 0:
            raise NotFoundError(resource="user", resource_id=user_id)


user_service = UserService()
