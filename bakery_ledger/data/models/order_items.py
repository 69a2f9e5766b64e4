from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class OrderItem(BaseModel):
    """Row model for the order_items table."""
    id: str = Field(description="Unique order item identifier")
    order_id: str = Field(description="Parent order identifier")
    product_id: str = Field(description="Product identifier")
    quantity: int = Field(description="Quantity ordered")
    unit_price: float = Field(description="Unit price snapshot at time of order")
    total_price: float = Field(description="Total price for this line (quantity * unit_price)")
    created_at: Optional[datetime] = Field(default=None, description="Row creation timestamp")


class NewOrderItem(BaseModel):
    """Insert payload for an order item. order_id is filled in once the parent exists."""
    order_id: Optional[str] = None
    product_id: str
    quantity: int
    unit_price: float
    total_price: float
