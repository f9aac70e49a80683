# storefront/domain/pricing.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    if isinstance(value, float):
        raise TypeError("Money must not be a float, use Decimal or str")
    amount = Decimal(value)
    if amount < 0:
        raise ValueError("Price cannot be negative")
    return amount


def line_subtotal(price, quantity: int) -> Decimal:
    if quantity < 0:
        raise ValueError("Quantity cannot be negative")
    return (_money(price) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def order_total(lines: Iterable[Tuple[Decimal, int]]) -> Decimal:
    """
    Sum of per-line subtotals, each line given as (unit price, quantity).
    """
    return sum((line_subtotal(price, qty) for price, qty in lines), ZERO).quantize(CENT)
