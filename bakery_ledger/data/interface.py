from __future__ import annotations

from typing import List, Protocol

from .models import (
    # Filter classes
    CustomerFilters,
    OrderFilters,
    OrderItemsFilters,
    PaymentFilters,
    # Write payloads
    CustomerUpdate,
    NewCustomer,
    NewOrder,
    NewOrderItem,
    NewPayment,
    NewProduct,
    OrderUpdate,
    ProductUpdate,
    # Result pair
    StoreResponse,
)


# ---- Ledger store protocol ----

class LedgerStore(Protocol):
    """
    Backend-agnostic contract for the bakery ledger.

    IMPORTANT for balance consistency:
    - Implementations own `customers.current_balance`. After every order insert or
      update and every payment insert they MUST keep it equal
      to SUM(orders.total_price) - SUM(payments.amount) for that customer: an order
      insert adds its total, an order update adds the change in total, a payment
      insert subtracts its amount.
    - Implementations MUST NOT raise for expected failures (constraint violations,
      missing rows); they return a StoreResponse whose `error` is set instead.
    - There is no multi-row transaction spanning orders and order_items; callers
      sequence those writes themselves.
    """

    # Customer queries and writes

    def list_customers(self, filters: CustomerFilters | None = None) -> StoreResponse:
        """List customers ordered by name. data: List[Customer]."""
        ...

    def get_customer(self, customer_id: str) -> StoreResponse:
        """Get one customer. data: Customer."""
        ...

    def insert_customer(self, customer: NewCustomer) -> StoreResponse:
        """Insert a customer. data: the created Customer."""
        ...

    def update_customer(self, customer_id: str, changes: CustomerUpdate) -> StoreResponse:
        """Update a customer. data: the updated Customer."""
        ...

    def delete_customer(self, customer_id: str) -> StoreResponse:
        """Delete a customer; fails with 23503 when orders or payments reference it."""
        ...

    # Product queries and writes

    def list_products(self) -> StoreResponse:
        """List products ordered by name. data: List[Product]."""
        ...

    def insert_product(self, product: NewProduct) -> StoreResponse:
        """Insert a product; fails with 23505 on a duplicate name. data: Product."""
        ...

    def update_product(self, product_id: str, changes: ProductUpdate) -> StoreResponse:
        """Update a product. data: the updated Product."""
        ...

    def delete_product(self, product_id: str) -> StoreResponse:
        """Delete a product; fails with 23503 when order items reference it."""
        ...

    # Order queries and writes

    def get_orders(self, filters: OrderFilters | None = None) -> StoreResponse:
        """Get orders, newest first. data: List[Order]."""
        ...

    def insert_order(self, order: NewOrder) -> StoreResponse:
        """Insert a parent order. data: the created Order (with its id)."""
        ...

    def update_order(self, order_id: str, changes: OrderUpdate) -> StoreResponse:
        """Update a parent order. data: the updated Order."""
        ...

    def get_order_items(self, filters: OrderItemsFilters | None = None) -> StoreResponse:
        """Get order items. data: List[OrderItem]."""
        ...

    def insert_order_items(self, items: List[NewOrderItem]) -> StoreResponse:
        """Insert order items in one call. data: List[OrderItem]."""
        ...

    def delete_order_items(self, order_id: str) -> StoreResponse:
        """Delete every item of an order. data: number of deleted rows."""
        ...

    # Payment queries and writes

    def get_payments(self, filters: PaymentFilters | None = None) -> StoreResponse:
        """Get payments, newest first. data: List[Payment]."""
        ...

    def insert_payment(self, payment: NewPayment) -> StoreResponse:
        """Insert a payment. data: the created Payment."""
        ...
