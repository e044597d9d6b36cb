"""
Product schemas.
"""
from pydantic import BaseModel, Field, ConfigDict, field_serializer, field_validator
from typing import Any, Optional, Dict, List
from datetime import datetime
from decimal import Decimal


_NULL_DEFAULTS = {"attributes": dict, "tags": list, "description": str}


class ProductFields(BaseModel):
    """
    Writable product fields, all optional.

    Used as-is for partial updates; creation checks the required fields
    itself so a missing one is reported as a 400 with the field names.
    """
    name: Optional[str] = Field(None, description="Product name")
    category: Optional[str] = Field(None, description="Free-text category label")
    price: Optional[Decimal] = Field(None, description="Product price")
    image_url: Optional[str] = Field(None, description="Product image URL")
    attributes: Optional[Dict[str, Any]] = Field(
        None, description="Category specific attributes (brand, storage, author, ...)"
    )
    tags: Optional[List[str]] = Field(None, description="Tags used for faceted filtering")
    description: Optional[str] = Field(None, description="Free text, used for full-text search")


class ProductCreate(ProductFields):
    """Schema for creating a product."""
    pass


class ProductUpdate(ProductFields):
    """Schema for updating a product. Omitted or null fields are left unchanged."""
    pass


class Product(BaseModel):
    """Schema for product with database fields."""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Database ID")
    name: str = Field(..., description="Product name")
    category: Optional[str] = Field(None, description="Category label")
    price: Optional[Decimal] = Field(None, description="Product price")
    image_url: Optional[str] = Field(None, description="Product image URL")
    attributes: Dict[str, Any] = Field(default_factory=dict, description="Attributes")
    tags: List[str] = Field(default_factory=list, description="Tags")
    description: str = Field("", description="Description")
    created_at: datetime = Field(..., description="Creation timestamp")

    @field_validator("attributes", "tags", "description", mode="before")
    @classmethod
    def fill_null(cls, v, info):
        # Rows written outside the API may hold NULL here.
        if v is None:
            return _NULL_DEFAULTS[info.field_name]()
        return v

    @field_serializer("price", when_used="json")
    def serialize_price(self, price: Optional[Decimal], _info):
        return float(price) if price is not None else None


class ProductSearchResult(Product):
    """Product matched by full-text search."""
    rank: float = Field(..., description="Full-text relevance rank")


class ProductDeleted(BaseModel):
    """Response after deleting a product."""
    message: str = Field("Product deleted successfully")
    id: int = Field(..., description="ID of the deleted product")
