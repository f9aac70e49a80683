# storefront/domain/order_status.py
from enum import Enum

from storefront.domain.errors import InvalidTransition


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# orders counted as revenue in statistics
SETTLED_STATUSES = (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.COMPLETED)

_FORWARD_RANK = {
    OrderStatus.PENDING_PAYMENT: 0,
    OrderStatus.PAID: 1,
    OrderStatus.SHIPPED: 2,
    OrderStatus.COMPLETED: 3,
}


def check_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """
    Validate an administrative status change.

    Returns False when the change is a no-op (target equals current),
    True when it must be applied. Raises InvalidTransition when the change
    leaves a terminal state or moves backwards.

    Forward moves may skip states (PENDING_PAYMENT -> SHIPPED is allowed).
    CANCELLED is reachable from every non-terminal state.
    """
    current = OrderStatus(current)
    target = OrderStatus(target)

    if current == target:
        return False
    if current in TERMINAL_STATUSES:
        raise InvalidTransition(current, target)
    if target == OrderStatus.CANCELLED:
        return True
    if _FORWARD_RANK[target] <= _FORWARD_RANK[current]:
        raise InvalidTransition(current, target)
    return True


def check_payment(current: OrderStatus) -> None:
    current = OrderStatus(current)
    if current != OrderStatus.PENDING_PAYMENT:
        raise InvalidTransition(current, OrderStatus.PAID)


def restocks(current: OrderStatus, target: OrderStatus) -> bool:
    # stock goes back only when entering CANCELLED for the first time
    return OrderStatus(target) == OrderStatus.CANCELLED and OrderStatus(current) != OrderStatus.CANCELLED
