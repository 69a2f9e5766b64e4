from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Payment(BaseModel):
    """Row model for the payments table."""
    id: str = Field(description="Unique payment identifier")
    customer_id: str = Field(description="Customer credited by this payment")
    amount: float = Field(description="Amount credited to the customer's balance")
    payment_date: datetime = Field(description="Payment timestamp")
    note: Optional[str] = Field(default=None, description="Free-form note")
    payment_method: str = Field(default="cash", description="Payment method label")
    description: Optional[str] = Field(default=None, description="Optional description")


class NewPayment(BaseModel):
    """Insert payload for a payment."""
    customer_id: str
    amount: float
    note: Optional[str] = None
    payment_method: str = "cash"
    description: Optional[str] = None
