from __future__ import annotations

from typing import Iterable, Mapping, Optional, Union

from pydantic import BaseModel, Field

from ..data.models import Customer
from ..drafts.models import CartDraft, QuantityDraft
from .pricing import draft_totals

Draft = Union[CartDraft, QuantityDraft]


class DraftSummary(BaseModel):
    """Totals over every draft that would be submitted."""
    total_items: int = Field(default=0, description="Sum of quantities")
    total_amount: float = Field(default=0.0, description="Sum of per-customer totals after discount")
    customer_count: int = Field(default=0, description="Customers with a positive subtotal")


class DraftPreview(BaseModel):
    """Per-customer draft figures shown next to the customer row."""
    total_quantity: int
    subtotal: float
    discount: float
    total: float
    item_count: int


def summarize_drafts(customers: Iterable[Customer], drafts: Mapping[str, Draft]) -> DraftSummary:
    """Drafts of customers not in ``customers`` and drafts with a zero subtotal are left out."""
    summary = DraftSummary()
    for customer in customers:
        draft = drafts.get(customer.id)
        if draft is None:
            continue
        totals = draft_totals(draft)
        if totals.subtotal <= 0:
            continue
        summary.customer_count += 1
        summary.total_items += totals.quantity
        summary.total_amount += totals.total
    return summary


def draft_preview(drafts: Mapping[str, Draft], customer_id: str) -> Optional[DraftPreview]:
    draft = drafts.get(customer_id)
    if draft is None:
        return None
    totals = draft_totals(draft)
    if totals.quantity == 0:
        return None
    return DraftPreview(
        total_quantity=totals.quantity,
        subtotal=totals.subtotal,
        discount=totals.discount,
        total=totals.total,
        item_count=len(draft.items) if isinstance(draft, CartDraft) else 1,
    )
