from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .orders import OrderStatus


class CustomerFilters(BaseModel):
    """Filters for the customer data."""
    search: Optional[str] = Field(default=None, description="Case-insensitive match on name, or substring of phone")
    customer_id: Optional[str | list[str]] = Field(default=None, description="Customer ID filter (single id or list of ids)")


class OrderFilters(BaseModel):
    """Filters for the order data."""
    start_ts: Optional[datetime] = Field(default=None, description="Start timestamp for order date range (inclusive)")
    end_ts: Optional[datetime] = Field(default=None, description="End timestamp for order date range (inclusive)")
    customer_id: Optional[str | list[str]] = Field(default=None, description="Customer ID filter (single id or list of ids)")
    order_id: Optional[str | list[str]] = Field(default=None, description="Order ID filter (single id or list of ids)")
    order_group_id: Optional[str] = Field(default=None, description="Batch identifier filter")
    status: Optional[OrderStatus] = Field(default=None, description="Order status filter")


class OrderItemsFilters(BaseModel):
    """Filters for the order items data."""
    order_id: Optional[str | list[str]] = Field(default=None, description="Order ID filter (single id or list of ids)")
    product_id: Optional[str | list[str]] = Field(default=None, description="Product ID filter (single id or list of ids)")


class PaymentFilters(BaseModel):
    """Filters for the payment data."""
    start_ts: Optional[datetime] = Field(default=None, description="Start timestamp for payment date range (inclusive)")
    end_ts: Optional[datetime] = Field(default=None, description="End timestamp for payment date range (inclusive)")
    customer_id: Optional[str | list[str]] = Field(default=None, description="Customer ID filter (single id or list of ids)")
