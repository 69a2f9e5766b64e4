"""Pricing and discount engine.

Pure functions shared by the cart preview, the draft summary and batch
aggregation, so the totals shown before submission are the totals debited to
the customer's balance afterwards. Currency is plain float arithmetic.
"""
from __future__ import annotations

from typing import Iterable, Union

from pydantic import BaseModel, Field

from ..data.models import Customer
from ..drafts.models import CartDraft, CartLine, QuantityDraft


class DraftTotals(BaseModel):
    """Derived totals of one draft."""
    quantity: int = Field(default=0, description="Total quantity over all lines")
    subtotal: float = Field(default=0.0, description="Sum of quantity * unit_price")
    discount: float = Field(default=0.0, description="Discount, clamped to the subtotal")
    total: float = Field(default=0.0, description="subtotal - discount, never negative")


def compute_subtotal(lines: Iterable[CartLine]) -> float:
    """Sum of quantity * unit_price; zero-quantity lines contribute nothing."""
    return sum(line.quantity * line.unit_price for line in lines)


def total_quantity(lines: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in lines)


def compute_discount(subtotal: float, customer: Customer) -> float:
    """Discount owed to ``customer`` on ``subtotal``.

    - ``none``, or an unset/zero/negative value: 0
    - ``percentage``: subtotal * value / 100
    - ``fixed``: min(value, subtotal)

    The result never exceeds the subtotal.
    """
    value = customer.discount_value
    if not customer.discount_type or customer.discount_type == "none" or not value or value < 0:
        return 0.0
    if subtotal <= 0:
        return 0.0
    if customer.discount_type == "percentage":
        discount = subtotal * value / 100
    else:
        discount = value
    return min(discount, subtotal)


def compute_total(subtotal: float, discount: float) -> float:
    """subtotal - discount, with the discount clamped to [0, subtotal]."""
    return subtotal - min(max(discount, 0.0), subtotal)


def blended_unit_price(total_price: float, quantity: int) -> float:
    """Reporting-only unit price of a multi-line order; 0 when quantity is 0."""
    return total_price / quantity if quantity > 0 else 0.0


def price_cart(lines: Iterable[CartLine], customer: Customer) -> DraftTotals:
    """Totals for lines being edited, with the discount taken from the customer's policy."""
    lines = list(lines)
    subtotal = compute_subtotal(lines)
    discount = compute_discount(subtotal, customer)
    return DraftTotals(
        quantity=total_quantity(lines),
        subtotal=subtotal,
        discount=discount,
        total=compute_total(subtotal, discount),
    )


def draft_totals(draft: Union[CartDraft, QuantityDraft]) -> DraftTotals:
    """Totals for a stored draft, using the discount saved with it."""
    if isinstance(draft, QuantityDraft):
        subtotal = draft.quantity * draft.unit_price
        return DraftTotals(quantity=draft.quantity, subtotal=subtotal, discount=0.0, total=subtotal)

    subtotal = compute_subtotal(draft.items)
    discount = min(draft.discount_amount, subtotal) if subtotal > 0 else 0.0
    return DraftTotals(
        quantity=total_quantity(draft.items),
        subtotal=subtotal,
        discount=discount,
        total=compute_total(subtotal, discount),
    )
