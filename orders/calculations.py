"""
Derived-value functions for orders.

Pure functions, called explicitly by the services before every write.
"""
from decimal import Decimal
from typing import Iterable, Optional

ZERO = Decimal('0.00')


def calculate_subtotal(quantity: Optional[int], unit_price: Optional[Decimal]) -> Decimal:
    """
    Line subtotal: unit_price x quantity.

    Returns zero when either argument is missing. No rounding is applied
    beyond Decimal arithmetic.
    """
    if quantity is None or unit_price is None:
        return ZERO
    return Decimal(unit_price) * quantity


def calculate_total(subtotals: Iterable[Optional[Decimal]]) -> Decimal:
    """Order total: sum of the item subtotals, zero for no items."""
    return sum((Decimal(s) for s in subtotals if s is not None), ZERO)
