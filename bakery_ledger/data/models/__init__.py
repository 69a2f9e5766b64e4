from .data_filters import (
    CustomerFilters,
    OrderFilters,
    OrderItemsFilters,
    PaymentFilters,
)

from .customers import Customer, CustomerUpdate, DiscountType, NewCustomer
from .products import NewProduct, Product, ProductUpdate
from .orders import NewOrder, Order, OrderStatus, OrderUpdate
from .order_items import NewOrderItem, OrderItem
from .payments import NewPayment, Payment
from .responses import (
    FOREIGN_KEY_VIOLATION,
    NOT_FOUND,
    UNIQUE_VIOLATION,
    StoreError,
    StoreResponse,
)

__all__ = [
    # Filter classes
    "CustomerFilters",
    "OrderFilters",
    "OrderItemsFilters",
    "PaymentFilters",
    # Row models
    "Customer",
    "Product",
    "Order",
    "OrderItem",
    "Payment",
    "DiscountType",
    "OrderStatus",
    # Write payloads
    "NewCustomer",
    "CustomerUpdate",
    "NewProduct",
    "ProductUpdate",
    "NewOrder",
    "OrderUpdate",
    "NewOrderItem",
    "NewPayment",
    # Result pair
    "StoreError",
    "StoreResponse",
    "UNIQUE_VIOLATION",
    "FOREIGN_KEY_VIOLATION",
    "NOT_FOUND",
]
