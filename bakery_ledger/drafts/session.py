from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from ..data.models import Customer, Product
from ..ledger.pricing import compute_discount, compute_subtotal, compute_total
from .models import CartDraft, CartLine
from .store import CartDraftStore


class CartSession:
    """Edits one customer's cart before it is saved to the draft store.

    Quantities are clamped at 0 here, so the store only ever receives
    non-negative lines.
    """

    def __init__(self, customer: Customer, lines: Iterable[CartLine], store: CartDraftStore) -> None:
        self.customer = customer
        self.store = store
        self._lines: List[CartLine] = list(lines)

    @classmethod
    def open(cls, customer: Customer, products: Iterable[Product], store: CartDraftStore) -> "CartSession":
        """Resume the customer's draft, or start with every product at quantity 0."""
        existing = store.get(customer.id)
        if existing is not None and existing.items:
            lines = list(existing.items)
        else:
            lines = [
                CartLine(product_id=p.id, product_name=p.name, quantity=0, unit_price=p.price)
                for p in products
            ]
        return cls(customer, lines, store)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    def quantity_of(self, product_id: str) -> int:
        for line in self._lines:
            if line.product_id == product_id:
                return line.quantity
        return 0

    def increment(self, product_id: str, delta: int) -> None:
        self._replace(product_id, lambda line: max(0, line.quantity + delta))

    def set_quantity(self, product_id: str, quantity: int) -> None:
        self._replace(product_id, lambda line: max(0, quantity))

    def _replace(self, product_id: str, new_quantity: Callable[[CartLine], int]) -> None:
        self._lines = [
            line.model_copy(update={"quantity": new_quantity(line)}) if line.product_id == product_id else line
            for line in self._lines
        ]

    @property
    def subtotal(self) -> float:
        return compute_subtotal(self._lines)

    @property
    def discount(self) -> float:
        return compute_discount(self.subtotal, self.customer)

    @property
    def total(self) -> float:
        return compute_total(self.subtotal, self.discount)

    @property
    def has_items(self) -> bool:
        return any(line.quantity > 0 for line in self._lines)

    def save(self) -> Optional[CartDraft]:
        """Store the non-zero lines with the discount computed now; an empty cart removes the draft."""
        active = [line for line in self._lines if line.quantity > 0]
        if not active:
            self.store.clear_cart(self.customer.id)
            return None
        return self.store.set_cart(self.customer.id, active, self.discount)
