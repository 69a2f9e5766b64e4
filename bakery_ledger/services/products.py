from __future__ import annotations

from ..data.interface import LedgerStore
from ..data.models import (
    NewProduct, ProductUpdate, StoreResponse, FOREIGN_KEY_VIOLATION, UNIQUE_VIOLATION,
)
from ..exceptions import ValidationError
from ..logging import get_logger
from .validation import Number, parse_amount, parse_count, require_name

logger = get_logger(__name__)


def _validated(name: str, price: Number, stock: Number) -> NewProduct:
    cleaned = require_name(name, "Product")
    value = parse_amount(price, field="price")
    if value < 0:
        raise ValidationError("Enter a valid price.")
    return NewProduct(name=cleaned, price=value, stock=parse_count(stock, field="stock"))


def add_product(store: LedgerStore, name: str, price: Number, stock: Number = 0) -> StoreResponse:
    product = _validated(name, price, stock)
    response = store.insert_product(product)
    if response.ok:
        return response
    logger.error(f"Could not add product {product.name}: {response.error.message}")
    if response.error.code == UNIQUE_VIOLATION:
        return StoreResponse.failure("A product with this name already exists.", UNIQUE_VIOLATION)
    return response


def update_product(store: LedgerStore, product_id: str, name: str, price: Number, stock: Number) -> StoreResponse:
    """Existing cart lines keep the price they were created with."""
    product = _validated(name, price, stock)
    response = store.update_product(product_id, ProductUpdate(**product.model_dump()))
    if response.ok:
        return response
    logger.error(f"Could not update product {product_id}: {response.error.message}")
    if response.error.code == UNIQUE_VIOLATION:
        return StoreResponse.failure("A product with this name already exists.", UNIQUE_VIOLATION)
    return response


def delete_product(store: LedgerStore, product_id: str) -> StoreResponse:
    response = store.delete_product(product_id)
    if response.ok:
        return response
    logger.error(f"Could not delete product {product_id}: {response.error.message}")
    if response.error.code == FOREIGN_KEY_VIOLATION:
        return StoreResponse.failure(
            "This product is used in existing orders and cannot be deleted.",
            FOREIGN_KEY_VIOLATION,
        )
    return response
