from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Product(BaseModel):
    """
    Catalog item as held by the system of record.

    The id is assigned by the record store on create and never changes
    afterwards. Cache entries are JSON snapshots of this model.
    """
    id: Optional[int] = Field(default=None, description="Record store identifier")
    name: str = Field(default="", description="Display name")
    description: str = Field(default="", description="Free-text description")
    category: str = Field(default="", description="Catalog category")
    stock: int = Field(default=0, ge=0, description="Units in stock")
    price: float = Field(default=0.0, ge=0, description="Unit price")
    updated_at: Optional[datetime] = Field(default=None, description="Last update time (UTC)")


class ProductPatch(BaseModel):
    """
    Update payload. ``None`` means the field was not supplied.

    Whether a supplied empty string or zero overwrites the stored value
    depends on the engine's merge policy.
    """
    id: int = Field(..., description="Identifier of the product to update")
    name: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None)
    stock: Optional[int] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0)


class SearchDocument(BaseModel):
    """Denormalized projection of a product for full-text search"""
    id: int = Field(..., description="Product identifier, used as document id")
    name: str = Field(default="")
    description: str = Field(default="")
    category: str = Field(default="")
    price: float = Field(default=0.0)
    stock: int = Field(default=0)
    version: Optional[int] = Field(
        default=None,
        exclude=True,
        description="Microseconds of the product's updated_at; an index keeps the highest"
    )

    @classmethod
    def from_product(cls, product: Product) -> "SearchDocument":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            category=product.category,
            price=product.price,
            stock=product.stock,
            version=int(product.updated_at.timestamp() * 1_000_000) if product.updated_at else None
        )
