from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _DraftModel(BaseModel):
    """Drafts are immutable snapshots persisted with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CartLine(_DraftModel):
    """One product line of a draft. unit_price is copied from the product when the line is created."""
    product_id: str = Field(description="Product identifier")
    product_name: str = Field(description="Product name at the time the line was created")
    quantity: int = Field(ge=0, description="Quantity; 0 is equivalent to absence")
    unit_price: float = Field(ge=0, description="Unit price snapshot")


class CartDraft(_DraftModel):
    """Rich draft: a set of product lines plus the discount computed when the cart was saved."""
    items: List[CartLine] = Field(default_factory=list, description="Product lines")
    discount_amount: float = Field(default=0.0, ge=0, description="Discount computed by the pricing engine at save time")


class QuantityDraft(_DraftModel):
    """Simple draft: a single quantity/unit price pair."""
    quantity: int = Field(ge=0, description="Quantity ordered")
    unit_price: float = Field(ge=0, description="Unit price")
