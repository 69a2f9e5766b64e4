"""Editing a submitted order.

An edit replaces the order's item rows and then rewrites the parent's
quantity, blended unit price and total. The backend trigger moves the
customer's balance by the change in total. The three writes are separate
calls, so a failure part way leaves the earlier ones in place; the result
names the step that failed.
"""
from __future__ import annotations

from typing import Iterable, List

from pydantic import BaseModel, Field

from ..data.interface import LedgerStore
from ..data.models import (
    NewOrderItem, Order, OrderFilters, OrderItemsFilters, OrderUpdate, StoreResponse, NOT_FOUND,
)
from ..drafts.models import CartLine
from ..exceptions import ValidationError
from ..ledger.pricing import blended_unit_price, compute_subtotal, total_quantity
from ..ledger.saga import Saga
from ..logging import get_logger

logger = get_logger(__name__)


class OrderEdit(BaseModel):
    """An order loaded for editing: its current lines plus every other product at 0."""
    order: Order
    lines: List[CartLine] = Field(default_factory=list)


def load_order_for_edit(store: LedgerStore, order_id: str) -> StoreResponse:
    """data: OrderEdit. Item lines keep their stored unit price; other products use today's price."""
    orders = store.get_orders(OrderFilters(order_id=order_id))
    if not orders.ok:
        return orders
    if not orders.data:
        return StoreResponse.failure(f"Order {order_id} not found", NOT_FOUND)
    items = store.get_order_items(OrderItemsFilters(order_id=order_id))
    if not items.ok:
        return items
    products = store.list_products()
    if not products.ok:
        return products

    names = {p.id: p.name for p in products.data}
    lines = [
        CartLine(
            product_id=item.product_id,
            product_name=names.get(item.product_id, item.product_id),
            quantity=item.quantity,
            unit_price=item.unit_price,
        )
        for item in items.data
    ]
    present = {line.product_id for line in lines}
    lines.extend(
        CartLine(product_id=p.id, product_name=p.name, quantity=0, unit_price=p.price)
        for p in products.data
        if p.id not in present
    )
    return StoreResponse.success(OrderEdit(order=orders.data[0], lines=lines))


def save_order_edit(store: LedgerStore, order_id: str, lines: Iterable[CartLine]) -> StoreResponse:
    """Replace the order's items with the non-zero ``lines``.

    The new total is the plain sum of the item totals; customer discounts are
    applied only when a batch is built, not when an order is edited.
    """
    active = [line for line in lines if line.quantity > 0]
    if not active:
        raise ValidationError("An order needs at least one item.")

    quantity = total_quantity(active)
    total = compute_subtotal(active)
    items = [
        NewOrderItem(
            order_id=order_id,
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.quantity * line.unit_price,
        )
        for line in active
    ]
    changes = OrderUpdate(
        quantity=quantity,
        unit_price=blended_unit_price(total, quantity),
        total_price=total,
    )

    existing = store.get_orders(OrderFilters(order_id=order_id))
    if not existing.ok:
        return existing
    if not existing.data:
        return StoreResponse.failure(f"Order {order_id} not found", NOT_FOUND)

    def update_parent(ctx: dict) -> StoreResponse:
        response = store.update_order(order_id, changes)
        ctx["order"] = response.data
        return response

    saga = (
        Saga(f"edit order {order_id}")
        .add_step("delete items", lambda ctx: store.delete_order_items(order_id))
        .add_step("insert items", lambda ctx: store.insert_order_items(items))
        .add_step("update order", update_parent)
    )
    result = saga.run()
    if not result.ok:
        return StoreResponse(error=result.error)

    logger.info(f"Order {order_id} updated: {quantity} item(s), total {total:.2f}")
    return StoreResponse.success(result.context["order"])
