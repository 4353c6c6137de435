"""Product actions."""

from decimal import Decimal
from numbers import Real
from typing import Any

from catalogkeeper.validation.types import Result, Violation, ViolationKind


def valid_quantity(quantity: Any) -> bool:
    """A quantity must be a real number or Decimal greater than zero (booleans
    excluded).
    """
    if isinstance(quantity, bool) or not isinstance(quantity, (Real, Decimal)):
        return False
    return quantity > 0


def buy(product: dict[str, Any], quantity: Any) -> Result[dict[str, str]]:
    """Buy ``quantity`` units of ``product``.

    Stock is not decremented; the stored product is left untouched.
    """
    if not valid_quantity(quantity):
        return Result.failure(
            Violation(
                message=f"Invalid quantity {quantity}",
                code="INVALID_QUANTITY",
                field="quantity",
                kind=ViolationKind.INPUT,
            )
        )
    return Result.success({"status": f"You bought {quantity} product(s)"})
