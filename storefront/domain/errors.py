# storefront/domain/errors.py
"""
Errors raised by the storefront services.

All of them are recoverable: a failed call leaves durable state unchanged and
the caller decides what to show. Routers map them onto HTTP status codes.
"""


class StorefrontError(ValueError):
    pass


class EmptyCart(StorefrontError):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("Cart is empty")


class InsufficientStock(StorefrontError):
    def __init__(self, product_name: str, product_id: int | None = None):
        self.product_name = product_name
        self.product_id = product_id
        super().__init__(f'Insufficient stock for "{product_name}"')


class InvalidTransition(StorefrontError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change order status from {current.value} to {target.value}")


class NotFound(StorefrontError):
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class CheckoutConflict(StorefrontError):
    """Cart changed between the snapshot and the commit; safe to retry."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("Cart was modified during checkout, please retry")


class ConcurrentModification(StorefrontError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} was modified concurrently, please retry")


class ProductInUse(StorefrontError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} is referenced by existing orders")
