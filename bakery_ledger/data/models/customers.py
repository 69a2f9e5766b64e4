from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

DiscountType = Literal["none", "percentage", "fixed"]


class Customer(BaseModel):
    """Row model for the customers table."""
    id: str = Field(description="Unique customer identifier")
    name: str = Field(description="Display name")
    phone: Optional[str] = Field(default=None, description="Optional phone number")
    current_balance: float = Field(default=0.0, description="Running balance maintained by the backend; positive means the customer owes money")
    discount_type: DiscountType = Field(default="none", description="Discount policy applied to this customer's orders")
    discount_value: float = Field(default=0.0, description="Percentage (0-100) or fixed currency amount, depending on discount_type")
    created_at: Optional[datetime] = Field(default=None, description="Row creation timestamp")

    @field_validator("discount_type", mode="before")
    @classmethod
    def _default_discount_type(cls, value):
        return value or "none"

    @field_validator("discount_value", "current_balance", mode="before")
    @classmethod
    def _default_zero(cls, value):
        return 0.0 if value is None else value


class NewCustomer(BaseModel):
    """Insert payload for a customer. The backend assigns id, balance and timestamps."""
    name: str
    phone: Optional[str] = None
    discount_type: DiscountType = "none"
    discount_value: float = 0.0


class CustomerUpdate(BaseModel):
    """Partial update payload for a customer. Unset fields are left untouched."""
    name: Optional[str] = None
    phone: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = None
