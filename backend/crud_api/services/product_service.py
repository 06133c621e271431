"""
Polystore CRUD API — Product Service (Relational Store)
=========================================================

What:  CRUD operations on the `produto` table.
Why:   Encapsulates SQL statements and error translation, independent of
       HTTP concerns.
How:   One parameterized SQLAlchemy statement per call, executed on the
       request-scoped AsyncSession. Writes commit here, before the handler
       returns, so a failed COMMIT is a DatabaseError and a 500. The
       dependency teardown in RelationalStore.session() runs after the
       response has started and only rolls back what was left open.
Who:   Called by crud_api.routes.products.

Query plans:
    list:    SELECT * FROM produto
    get:     SELECT * FROM produto WHERE id = :id
    create:  INSERT INTO produto (nome, descricao, preco) VALUES (...)
    update:  UPDATE produto SET nome=..., descricao=..., preco=... WHERE id = :id
    delete:  DELETE FROM produto WHERE id = :id

    Update and delete check the affected-row count; zero rows → NotFoundError.
"""

import logging
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from crud_api.database import RelationalStore
from crud_api.exceptions import DatabaseError, NotFoundError
from crud_api.models.product import Product
from crud_api.schemas.product import ProductCreated, ProductIn, ProductResponse

logger = logging.getLogger(__name__)


def to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
    )


class ProductService:
    """
    Business logic layer for products.

    Error Handling Strategy:
        SQLAlchemyError (connection loss, query error, missing table) is
        wrapped in DatabaseError. The wrapper keeps the exception type name
        only; the SQL text and driver message are logged here.
    """

    async def check_connection(self, store: RelationalStore) -> None:
        try:
            await store.ping()
        except SQLAlchemyError as e:
            logger.error("MySQL ping failed: %s", str(e))
            raise DatabaseError.from_exception("Could not connect to MySQL", e)

    async def init_schema(self, store: RelationalStore) -> None:
        """Create the produto table if it does not exist (idempotent)."""
        try:
            await store.init_schema()
        except SQLAlchemyError as e:
            logger.error("Schema initialization failed: %s", str(e))
            raise DatabaseError.from_exception("Could not create the database structure", e)

    async def list_products(self, db: AsyncSession) -> List[ProductResponse]:
        try:
            result = await db.execute(select(Product))
            products = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", str(e))
            raise DatabaseError.from_exception("Could not retrieve products", e)
        return [to_response(product) for product in products]

    async def get_product(self, db: AsyncSession, product_id: int) -> ProductResponse:
        try:
            result = await db.execute(select(Product).where(Product.id == product_id))
            product = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError.from_exception("Could not retrieve the product", e)
        if product is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return to_response(product)

    async def create_product(self, db: AsyncSession, data: ProductIn) -> ProductCreated:
        product = Product(name=data.name, description=data.description, price=data.price)
        try:
            db.add(product)
            # flush sends the INSERT and assigns the auto-increment id
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating product: %s", str(e))
            raise DatabaseError.from_exception("Could not create the product", e)
        return ProductCreated(id=product.id)

    async def update_product(
        self, db: AsyncSession, product_id: int, data: ProductIn
    ) -> None:
        statement = (
            update(Product)
            .where(Product.id == product_id)
            .values(name=data.name, description=data.description, price=data.price)
        )
        try:
            result = await db.execute(statement)
            if result.rowcount == 0:
                raise NotFoundError(resource="product", resource_id=product_id)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating product %s: %s", product_id, str(e))
            raise DatabaseError.from_exception("Could not update the product", e)

    async def delete_product(self, db: AsyncSession, product_id: int) -> None:
        try:
            result = await db.execute(delete(Product).where(Product.id == product_id))
            if result.rowcount == 0:
                raise NotFoundError(resource="product", resource_id=product_id)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e))
            raise DatabaseError.from_exception("Could not remove the product", e)


product_service = ProductService()
