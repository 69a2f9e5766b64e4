from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

OrderStatus = Literal["pending", "delivered"]


class Order(BaseModel):
    """Row model for the orders table (one parent row per customer per batch)."""
    id: str = Field(description="Unique order identifier")
    customer_id: str = Field(description="Customer who placed the order")
    quantity: int = Field(description="Total quantity over all items")
    unit_price: float = Field(description="Blended unit price (total_price / quantity), reporting only")
    total_price: float = Field(description="Amount debited to the customer's balance")
    status: OrderStatus = Field(default="pending", description="Delivery/payment status")
    order_date: datetime = Field(description="Order timestamp")
    order_group_id: Optional[str] = Field(default=None, description="Batch identifier shared by every order of one submission")


class NewOrder(BaseModel):
    """Insert payload for a parent order."""
    customer_id: str
    quantity: int
    unit_price: float
    total_price: float
    order_group_id: Optional[str] = None


class OrderUpdate(BaseModel):
    """Partial update payload for an order."""
    quantity: Optional[int] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    status: Optional[OrderStatus] = None
