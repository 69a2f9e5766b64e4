from __future__ import annotations

from typing import Iterable, Tuple

from ..config import get_config


def format_currency(amount: float) -> str:
    symbol = get_config().currency_symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def product_summary(items: Iterable[Tuple[str, int]], quantity: int) -> str:
    """Item breakdown like '3x Lavash, 2x Pide', or '<quantity> pcs' for an order without item rows."""
    parts = [f"{qty}x {name}" for name, qty in items]
    if parts:
        return ", ".join(parts)
    return f"{quantity} pcs"
