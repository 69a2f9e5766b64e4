"""Batch aggregation: turns the draft map into per-customer order records.

Every record of one submission shares a single batch identifier
(``order_group_id``) so the day's orders can be grouped in reports.
"""
from __future__ import annotations

import uuid
from typing import Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from ..data.models import Customer, NewOrder, NewOrderItem
from ..drafts.models import CartDraft, QuantityDraft
from .pricing import blended_unit_price, draft_totals


class CustomerSubmission(BaseModel):
    """One customer's share of a batch: the parent order and its item rows."""
    customer_id: str
    customer_name: str
    order: NewOrder
    items: List[NewOrderItem] = Field(default_factory=list)
    subtotal: float = Field(description="Sum of the item totals")
    discount: float = Field(default=0.0, description="Discount taken off the subtotal")


class OrderBatch(BaseModel):
    """Ephemeral aggregation of one submission; never persisted as such."""
    batch_id: str
    submissions: List[CustomerSubmission] = Field(default_factory=list)

    @property
    def customer_count(self) -> int:
        return len(self.submissions)

    @property
    def total_items(self) -> int:
        return sum(s.order.quantity for s in self.submissions)

    @property
    def total_amount(self) -> float:
        return sum(s.order.total_price for s in self.submissions)


def new_batch_id() -> str:
    return str(uuid.uuid4())


def _by_name(customers: Iterable[Customer]) -> List[Customer]:
    return sorted(customers, key=lambda c: c.name)


def build_order_batch(
    customers: Iterable[Customer],
    drafts: Mapping[str, CartDraft],
    batch_id: Optional[str] = None,
) -> OrderBatch:
    """Aggregate product-line drafts.

    Customers are visited by name; those without a draft or with a subtotal of 0
    are skipped. The parent order carries the discounted total and the blended
    unit price; one item row is emitted per line with a positive quantity.
    """
    batch_id = batch_id or new_batch_id()
    submissions: List[CustomerSubmission] = []

    for customer in _by_name(customers):
        draft = drafts.get(customer.id)
        if draft is None or not draft.items:
            continue
        totals = draft_totals(draft)
        if totals.subtotal <= 0:
            continue

        items = [
            NewOrderItem(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=line.quantity * line.unit_price,
            )
            for line in draft.items
            if line.quantity > 0
        ]
        order = NewOrder(
            customer_id=customer.id,
            quantity=totals.quantity,
            unit_price=blended_unit_price(totals.total, totals.quantity),
            total_price=totals.total,
            order_group_id=batch_id,
        )
        submissions.append(CustomerSubmission(
            customer_id=customer.id,
            customer_name=customer.name,
            order=order,
            items=items,
            subtotal=totals.subtotal,
            discount=totals.discount,
        ))

    return OrderBatch(batch_id=batch_id, submissions=submissions)


def build_quantity_batch(
    customers: Iterable[Customer],
    drafts: Mapping[str, QuantityDraft],
    batch_id: Optional[str] = None,
) -> OrderBatch:
    """Aggregate single quantity/price drafts: one parent order each, no item rows."""
    batch_id = batch_id or new_batch_id()
    submissions: List[CustomerSubmission] = []

    for customer in _by_name(customers):
        draft = drafts.get(customer.id)
        if draft is None:
            continue
        totals = draft_totals(draft)
        if totals.subtotal <= 0:
            continue
        submissions.append(CustomerSubmission(
            customer_id=customer.id,
            customer_name=customer.name,
            order=NewOrder(
                customer_id=customer.id,
                quantity=draft.quantity,
                unit_price=draft.unit_price,
                total_price=totals.total,
                order_group_id=batch_id,
            ),
            subtotal=totals.subtotal,
        ))

    return OrderBatch(batch_id=batch_id, submissions=submissions)
