"""
Polystore CRUD API — Product Route Handlers (MySQL)
=====================================================

What:  GET /mysql/testar-conexao, POST /init-db and CRUD on /produtos.
How:   Thin handlers: one ProductService call, one event log line, one
       response model. Path ids are integers (FastAPI answers 422 for
       anything else).
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from crud_api.database import RelationalStore
from crud_api.deps import get_db_session, get_relational_store
from crud_api.event_log import event_log
from crud_api.schemas.common import ConnectionStatus, ErrorResponse, MessageResponse
from crud_api.schemas.product import ProductCreated, ProductIn, ProductResponse
from crud_api.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["CRUD MySQL"])

NOT_FOUND = {404: {"description": "Product not found", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "MySQL error", "model": ErrorResponse}}

ProductId = Annotated[int, Path(description="Product ID")]


@router.get(
    "/mysql/testar-conexao",
    response_model=ConnectionStatus,
    responses=SERVER_ERROR,
    summary="Test the MySQL connection",
    description="Runs SELECT 1 through the connection pool.",
)
async def test_connection(
    request: Request,
    store: RelationalStore = Depends(get_relational_store),
) -> ConnectionStatus:
    await product_service.check_connection(store)
    event_log.info("MySQL connection succeeded", request)
    return ConnectionStatus(message="MySQL connection succeeded!")


@router.post(
    "/init-db",
    response_model=MessageResponse,
    responses=SERVER_ERROR,
    summary="Create the produto table",
    description="Creates the produto table if it does not exist. Safe to call repeatedly.",
)
async def init_db(
    request: Request,
    store: RelationalStore = Depends(get_relational_store),
) -> MessageResponse:
    await product_service.init_schema(store)
    event_log.info("Database structure created", request)
    return MessageResponse(message="Database and table created successfully.")


@router.get(
    "/produtos",
    response_model=List[ProductResponse],
    responses=SERVER_ERROR,
    summary="List all products",
)
async def list_products(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    products = await product_service.list_products(db)
    event_log.info("Products found", request, products)
    return products


@router.get(
    "/produtos/{product_id}",
    response_model=ProductResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get a product by ID",
)
async def get_product(
    request: Request,
    product_id: ProductId,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    product = await product_service.get_product(db, product_id)
    event_log.info("Product found", request, product)
    return product


@router.post(
    "/produtos",
    status_code=201,
    response_model=ProductCreated,
    responses=SERVER_ERROR,
    summary="Create a product",
)
async def create_product(
    request: Request,
    body: ProductIn,
    db: AsyncSession = Depends(get_db_session),
) -> ProductCreated:
    created = await product_service.create_product(db, body)
    event_log.info("Product created", request, created)
    return created


@router.put(
    "/produtos/{product_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Update a product",
    description="Replaces name, description and price of an existing product.",
)
async def update_product(
    request: Request,
    body: ProductIn,
    product_id: ProductId,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await product_service.update_product(db, product_id, body)
    event_log.info("Product updated", request)
    return MessageResponse(message="Product updated successfully")


@router.delete(
    "/produtos/{product_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Remove a product",
)
async def delete_product(
    request: Request,
    product_id: ProductId,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await product_service.delete_product(db, product_id)
    event_log.info("Product removed", request)
    return MessageResponse(message="Product removed successfully")
