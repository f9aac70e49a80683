# storefront/domain/cart_line.py
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CartLine:
    """One line of a cart as seen at checkout time."""

    product_id: int
    product_name: str
    unit_price: Decimal
    stock: int
    quantity: int

    @property
    def in_stock(self) -> bool:
        return self.stock >= self.quantity


@dataclass(frozen=True)
class ShippingInfo:
    name: str
    phone: str
    address: str
    payment_method: str | None = None
