"""Customer maintenance, payments and the per-customer transaction timeline.

Input problems raise ValidationError before the backend is called. Backend
failures come back as StoreResponse errors; the two constraint codes the UI
expects are reworded, anything else is passed through verbatim.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..config import get_config
from ..data.interface import LedgerStore
from ..data.models import (
    CustomerUpdate, NewCustomer, NewPayment, OrderFilters, OrderItemsFilters,
    PaymentFilters, StoreResponse, FOREIGN_KEY_VIOLATION,
)
from ..exceptions import ValidationError
from ..logging import get_logger
from .formatting import product_summary
from .validation import Number, clean_optional, parse_amount, parse_discount, require_name

logger = get_logger(__name__)


class TransactionItem(BaseModel):
    """One entry of a customer's timeline: an order (debit) or a payment (credit)."""
    id: str
    type: Literal["order", "payment"]
    date: datetime
    amount: float
    quantity: Optional[int] = Field(default=None, description="Orders only")
    product_summary: Optional[str] = Field(default=None, description="Orders only")
    note: Optional[str] = Field(default=None, description="Payments only")
    payment_method: Optional[str] = Field(default=None, description="Payments only")


def add_customer(
    store: LedgerStore,
    name: str,
    phone: Optional[str] = None,
    discount_type: Optional[str] = "none",
    discount_value: Optional[Number] = None,
) -> StoreResponse:
    discount_type, discount_value = parse_discount(discount_type, discount_value)
    payload = NewCustomer(
        name=require_name(name, "Customer"),
        phone=clean_optional(phone),
        discount_type=discount_type,
        discount_value=discount_value,
    )
    response = store.insert_customer(payload)
    if not response.ok:
        logger.error(f"Could not add customer {payload.name}: {response.error.message}")
    return response


def update_customer(
    store: LedgerStore,
    customer_id: str,
    name: str,
    phone: Optional[str] = None,
    discount_type: Optional[str] = "none",
    discount_value: Optional[Number] = None,
) -> StoreResponse:
    """Replace the editable fields of a customer. The balance is never touched here."""
    discount_type, discount_value = parse_discount(discount_type, discount_value)
    changes = CustomerUpdate(
        name=require_name(name, "Customer"),
        phone=clean_optional(phone),
        discount_type=discount_type,
        discount_value=discount_value,
    )
    response = store.update_customer(customer_id, changes)
    if not response.ok:
        logger.error(f"Could not update customer {customer_id}: {response.error.message}")
    return response


def delete_customer(store: LedgerStore, customer_id: str) -> StoreResponse:
    response = store.delete_customer(customer_id)
    if response.ok:
        return response
    logger.error(f"Could not delete customer {customer_id}: {response.error.message}")
    if response.error.code == FOREIGN_KEY_VIOLATION:
        return StoreResponse.failure(
            "This customer has orders or payments and cannot be deleted.",
            FOREIGN_KEY_VIOLATION,
        )
    return response


def record_payment(
    store: LedgerStore,
    customer_id: str,
    amount: Number,
    note: Optional[str] = None,
    method: Optional[str] = None,
) -> StoreResponse:
    """Record a payment; the backend lowers the customer's balance by ``amount``."""
    value = parse_amount(amount)
    if value <= 0:
        raise ValidationError("Enter a valid amount.")
    payment = NewPayment(
        customer_id=customer_id,
        amount=value,
        note=clean_optional(note),
        payment_method=method or get_config().default_payment_method,
    )
    response = store.insert_payment(payment)
    if response.ok:
        logger.info(f"Recorded payment of {value:.2f} for customer {customer_id}")
    else:
        logger.error(f"Could not record payment for customer {customer_id}: {response.error.message}")
    return response


def customer_timeline(store: LedgerStore, customer_id: str) -> StoreResponse:
    """Orders and payments of one customer merged newest first. data: List[TransactionItem]."""
    orders = store.get_orders(OrderFilters(customer_id=customer_id))
    if not orders.ok:
        return orders
    payments = store.get_payments(PaymentFilters(customer_id=customer_id))
    if not payments.ok:
        return payments

    order_ids = [o.id for o in orders.data]
    items = store.get_order_items(OrderItemsFilters(order_id=order_ids)) if order_ids else StoreResponse.success([])
    if not items.ok:
        return items
    products = store.list_products()
    if not products.ok:
        return products

    names = {p.id: p.name for p in products.data}
    by_order: dict = {}
    for item in items.data:
        by_order.setdefault(item.order_id, []).append((names.get(item.product_id, "?"), item.quantity))

    timeline: List[TransactionItem] = [
        TransactionItem(
            id=o.id,
            type="order",
            date=o.order_date,
            amount=o.total_price,
            quantity=o.quantity,
            product_summary=product_summary(by_order.get(o.id, []), o.quantity),
        )
        for o in orders.data
    ]
    timeline.extend(
        TransactionItem(
            id=p.id,
            type="payment",
            date=p.payment_date,
            amount=p.amount,
            note=p.note,
            payment_method=p.payment_method or get_config().default_payment_method,
        )
        for p in payments.data
    )
    timeline.sort(key=lambda t: t.date, reverse=True)
    return StoreResponse.success(timeline)
