"""Parsing and validation of user-entered values.

Everything here raises ValidationError before any backend call is made.
"""
from __future__ import annotations

from typing import Optional, Tuple, Union

from ..data.models import DiscountType
from ..exceptions import ValidationError

Number = Union[str, int, float]

DISCOUNT_TYPES = ("none", "percentage", "fixed")


def parse_amount(value: Number, field: str = "amount") -> float:
    """Parse a decimal number, accepting a comma as decimal separator ("12,5")."""
    if isinstance(value, bool):
        raise ValidationError(f"Enter a valid {field}.")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            raise ValidationError(f"Enter a valid {field}.") from None
    if number != number or number in (float("inf"), float("-inf")):
        raise ValidationError(f"Enter a valid {field}.")
    return number


def parse_count(value: Number, field: str = "quantity") -> int:
    """Parse a non-negative whole number."""
    if isinstance(value, bool):
        raise ValidationError(f"Enter a valid {field}.")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"Enter a valid {field}.")
        number = int(value)
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            raise ValidationError(f"Enter a valid {field}.") from None
    if number < 0:
        raise ValidationError(f"Enter a valid {field}.")
    return number


def require_name(name: Optional[str], what: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"{what} name is required.")
    return cleaned


def clean_optional(text: Optional[str]) -> Optional[str]:
    cleaned = (text or "").strip()
    return cleaned or None


def parse_discount(discount_type: Optional[str], value: Optional[Number]) -> Tuple[DiscountType, float]:
    """Validate a discount policy; ``none`` always carries a value of 0."""
    discount_type = discount_type or "none"
    if discount_type not in DISCOUNT_TYPES:
        raise ValidationError(f"Unknown discount type: {discount_type}")
    if discount_type == "none":
        return "none", 0.0
    if value is None or (isinstance(value, str) and not value.strip()):
        return discount_type, 0.0
    amount = parse_amount(value, field="discount")
    if amount < 0:
        raise ValidationError("Discount cannot be negative.")
    if discount_type == "percentage" and amount > 100:
        raise ValidationError("Percentage discount must be between 0 and 100.")
    return discount_type, amount
