from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    """Row model for the products table."""
    id: str = Field(description="Unique product identifier")
    name: str = Field(description="Product name (unique)")
    price: float = Field(description="Current unit price")
    stock: int = Field(default=0, description="Stock count")
    created_at: Optional[datetime] = Field(default=None, description="Row creation timestamp")


class NewProduct(BaseModel):
    """Insert payload for a product."""
    name: str
    price: float
    stock: int = 0


class ProductUpdate(BaseModel):
    """Partial update payload for a product."""
    name: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
