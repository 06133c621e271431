"""
Polystore CRUD API — User Route Handlers (MongoDB)
====================================================

What:  GET /mongodb/testar-conexao and CRUD on /usuarios.
How:   Each handler calls one UserService method, records the outcome in the
       event log and returns the shaped response. Failures propagate as
       crud_api.exceptions types and are logged and answered by the global
       handlers in main.py.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from crud_api.deps import get_document_store
from crud_api.document_store import DocumentStore
from crud_api.event_log import event_log
from crud_api.schemas.common import ConnectionStatus, ErrorResponse, MessageResponse
from crud_api.schemas.user import UserCreate, UserResponse, UserUpdate
from crud_api.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["CRUD MongoDb"])

NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "MongoDB error", "model": ErrorResponse}}


@router.get(
    "/mongodb/testar-conexao",
    response_model=ConnectionStatus,
    responses=SERVER_ERROR,
    summary="Test the MongoDB connection",
    description="Checks that the application can reach MongoDB and read the users collection.",
)
async def test_connection(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> ConnectionStatus:
    user_found = await user_service.check_connection(store)
    event_log.info("MongoDB connection succeeded", request)
    if user_found:
        message = "MongoDB connection succeeded and a user was found."
    else:
        message = "MongoDB connection succeeded, but no user was found."
    return ConnectionStatus(message=message, user_found=user_found)


@router.post(
    "/usuarios",
    status_code=201,
    response_model=UserResponse,
    responses=SERVER_ERROR,
    summary="Create a user",
)
async def create_user(
    request: Request,
    body: UserCreate,
    store: DocumentStore = Depends(get_document_store),
) -> UserResponse:
    user = await user_service.create_user(store, body)
    event_log.info("User created", request, user)
    return user


@router.get(
    "/usuarios",
    response_model=List[UserResponse],
    responses=SERVER_ERROR,
    summary="List all users",
)
async def list_users(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> List[UserResponse]:
    users = await user_service.list_users(store)
    event_log.info("Users found", request, users)
    return users


@router.get(
    "/usuarios/{user_id}",
    response_model=UserResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get a user by ID",
)
async def get_user(
    user_id: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> UserResponse:
    user = await user_service.get_user(store, user_id)
    event_log.info("User found", request, user)
    return user


@router.put(
    "/usuarios/{user_id}",
    response_model=UserResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Update a user",
    description="Replaces only the fields present in the body.",
)
async def update_user(
    user_id: str,
    request: Request,
    body: UserUpdate,
    store: DocumentStore = Depends(get_document_store),
) -> UserResponse:
    user = await user_service.update_user(store, user_id, body)
    event_log.info("User updated", request, user)
    return user


@router.delete(
    "/usuarios/{user_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Remove a user",
)
async def delete_user(
    user_id: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> MessageResponse:
    await user_service.delete_user(store, user_id)
    event_log.info("User removed", request)
    return MessageResponse(message="User removed successfully")
