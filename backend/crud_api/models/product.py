"""
Polystore CRUD API — Product SQLAlchemy Model
===============================================

What:  ORM model representing the `produto` table in MySQL.
Why:   Typed, parameterized statements for the product CRUD routes; the
       same metadata drives POST /init-db.
Who:   Used by ProductService and RelationalStore.init_schema().

Table Design:
    id          INT AUTO_INCREMENT PRIMARY KEY
    nome        VARCHAR(255) NOT NULL
    descricao   VARCHAR(255) NOT NULL
    preco       DECIMAL(10,2) NOT NULL

    Column names are kept from the existing schema; Python attributes use
    English names.
"""

from decimal import Decimal

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from crud_api.database import Base


class Product(Base):
    """
    A product row. Lifecycle is owned entirely by the relational store:
    no soft delete, no versioning, last write wins.
    """

    __tablename__ = "produto"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column("nome", String(255), nullable=False)

    description: Mapped[str] = mapped_column("descricao", String(255), nullable=False)

    # DECIMAL(10,2): exact money arithmetic, two decimal places
    price: Mapped[Decimal] = mapped_column("preco", Numeric(10, 2), nullable=False)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
