"""
Polystore CRUD API — User Request/Response Schemas
====================================================

What:  Pydantic models for the /usuarios routes.
How:   Documents are stored as {"_id": ObjectId, "nome": ..., "email": ...};
       the schemas expose the same keys on the wire through aliases.
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Body of POST /usuarios."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="nome", description="User name")
    email: str = Field(description="User email")


class UserUpdate(BaseModel):
    """
    Body of PUT /usuarios/{id}.

    Only the fields present in the request are written; omitted fields keep
    their stored value.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, alias="nome")
    email: Optional[str] = None

    def to_document(self) -> dict:
        """The $set document: supplied fields only, keyed by stored names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class UserResponse(BaseModel):
    """A stored user document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id", description="User ID (MongoDB ObjectId)")
    name: Optional[str] = Field(default=None, alias="nome")
    email: Optional[str] = None

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "UserResponse":
        return cls(
            id=str(document["_id"]),
            name=document.get("nome"),
            email=document.get("email"),
        )
