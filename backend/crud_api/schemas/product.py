"""
Polystore CRUD API — Product Request/Response Schemas
=======================================================

What:  Pydantic models for the /produtos routes.
Why:   Request validation, response serialization and OpenAPI docs.
How:   Wire names (nome, descricao, preco) are aliases of English attribute
       names. FastAPI serializes response models by alias, and
       populate_by_name lets services build them with the attribute names.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProductIn(BaseModel):
    """
    Body of POST /produtos and PUT /produtos/{id}.

    All three fields are required on both routes; PUT replaces the row.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="nome", description="Product name")
    description: str = Field(alias="descricao", description="Product description")
    price: Decimal = Field(alias="preco", description="Product price")


class ProductResponse(BaseModel):
    """A row of the produto table."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="Product ID")
    name: str = Field(alias="nome")
    description: str = Field(alias="descricao")
    # float on the way out: JSON number rather than pydantic's Decimal string
    price: float = Field(alias="preco")


class ProductCreated(BaseModel):
    """Returned by POST /produtos with HTTP 201."""

    id: int = Field(description="ID of the created product")
