# storefront/services/order_service.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderItemModel, OrderModel
from storefront.domain.cart_line import CartLine, ShippingInfo
from storefront.domain.errors import CheckoutConflict, EmptyCart, InsufficientStock, NotFound
from storefront.domain.order_status import SETTLED_STATUSES, OrderStatus
from storefront.domain.pricing import CENT, line_subtotal, order_total
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.audit_service import AuditService
from storefront.services.cart_service import CartService
from storefront.services.inventory_service import InventoryLedger
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger
from storefront.utils.retry import db_retry

logger = get_logger(__name__)


class OrderService:
    """
    Checkout and order queries.

    place_order has two phases:
    1. one transaction: order + lines + stock decrement + emptied cart
    2. after commit, best effort: purchase log + confirmation email
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.users = UserRepo(db)
        self.cart_service = CartService(db)
        self.inventory = InventoryLedger(db)
        self.audit = AuditService(db)
        self.notification_service = notification_service or NotificationService()

    # =====================================================
    # CHECKOUT
    # =====================================================
    def place_order(self, user_id: int, shipping: ShippingInfo) -> Dict[str, Any]:
        """
        Use Case: place an order from the user's current cart.

        Raises EmptyCart, InsufficientStock (cart left untouched),
        NotFound for an unknown user, CheckoutConflict when the cart changed
        while checking out.
        """
        recipient = self.users.get_email(user_id)
        if recipient is None:
            raise NotFound("User", user_id)

        order, lines = self._checkout(user_id, shipping)

        logger.info(f"Order {order['id']} created for user {user_id}, total {order['total_amount']}")

        self._after_commit(user_id, recipient, order, lines)

        return order

    @db_retry()
    def _checkout(self, user_id: int, shipping: ShippingInfo) -> Tuple[Dict[str, Any], Tuple[CartLine, ...]]:
        lines = self.cart_service.snapshot(user_id)

        if not lines:
            self.db.rollback()
            raise EmptyCart(user_id)

        # pre-flight, advisory only: the conditional decrement below decides
        for line in lines:
            if not line.in_stock:
                self.db.rollback()
                logger.warning(
                    f"Checkout of user {user_id} rejected: {line.product_name} "
                    f"stock {line.stock} < {line.quantity}"
                )
                raise InsufficientStock(line.product_name, line.product_id)

        total = order_total((line.unit_price, line.quantity) for line in lines)

        try:
            order = self.repo.add_order(
                OrderModel(
                    user_id=user_id,
                    status=OrderStatus.PENDING_PAYMENT.value,
                    total_amount=total,
                    shipping_name=shipping.name,
                    shipping_phone=shipping.phone,
                    shipping_address=shipping.address,
                    payment_method=shipping.payment_method,
                ),
                [
                    OrderItemModel(
                        product_id=line.product_id,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                    )
                    for line in lines
                ],
            )

            # lines are sorted by product id, rows get locked in a fixed order
            for line in lines:
                self.inventory.reserve(line.product_id, line.quantity)

            deleted = self.carts.delete_exact_lines(
                user_id, [(line.product_id, line.quantity) for line in lines]
            )
            if deleted != len(lines):
                raise CheckoutConflict(user_id)

            # plain values, nothing lazy is read after commit
            result = self._to_dict(order, lines_with_names(lines))

            self.db.commit()
        except InsufficientStock:
            self.db.rollback()
            logger.warning(f"Checkout of user {user_id} lost the race for stock, rolled back")
            raise
        except Exception:
            self.db.rollback()
            raise

        return result, lines

    def _after_commit(self, user_id: int, recipient: str, order: Dict[str, Any], lines: Tuple[CartLine, ...]):
        # failures here never undo or fail the order
        try:
            self.audit.record_purchase(user_id, order["id"], lines)
        except Exception:
            logger.exception(f"Failed to write purchase log for order {order['id']}")

        try:
            self.notification_service.send_order_confirmation(
                recipient,
                order["id"],
                order["total_amount"],
                [
                    {"name": line.product_name, "quantity": line.quantity, "price": line.unit_price}
                    for line in lines
                ],
            )
        except Exception:
            logger.exception(f"Failed to enqueue confirmation for order {order['id']}")

    # =====================================================
    # QUERIES
    # =====================================================
    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        # someone else's order looks the same as a missing one
        if not order or order.user_id != user_id:
            raise NotFound("Order", order_id)

        return self._to_dict(order, self._items(order.id))

    def get_order_admin(self, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound("Order", order_id)
        return self._to_dict(order, self._items(order.id))

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        return [self._to_dict(o, self._items(o.id)) for o in self.repo.list_user_orders(user_id)]

    def list_all_orders(self, status: OrderStatus | None = None, limit: int = 20, offset: int = 0) -> Dict[str, Any]:
        status_value = OrderStatus(status).value if status else None
        orders = self.repo.list_orders(status_value, limit=limit, offset=offset)
        return {
            "orders": [self._to_dict(o, self._items(o.id)) for o in orders],
            "total": self.repo.count_orders(status_value),
            "limit": limit,
            "offset": offset,
        }

    def sales_statistics(self, start: datetime | None = None, end: datetime | None = None) -> Dict[str, Any]:
        """
        Revenue over settled orders, order counts and best sellers, optionally
        limited to orders created within [start, end].
        """
        settled = [s.value for s in SETTLED_STATUSES]

        total_sales = Decimal(str(self.repo.total_sales(settled, start, end))).quantize(CENT)
        by_status = self.repo.count_by_status(start, end)

        return {
            "total_sales": total_sales,
            "orders_by_status": [
                {"status": status, "count": by_status.get(status.value, 0)}
                for status in OrderStatus
            ],
            "top_products": [
                {
                    "product_id": row.product_id,
                    "name": row.name,
                    "quantity": int(row.quantity),
                    "order_count": int(row.order_count),
                    "revenue": Decimal(str(row.revenue)).quantize(CENT),
                }
                for row in self.repo.top_products(settled, start, end)
            ],
        }

    # =====================================================
    # helpers
    # =====================================================
    def _items(self, order_id: int) -> List[Dict[str, Any]]:
        return [
            {
                "product_id": item.product_id,
                "name": name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
            }
            for item, name in self.repo.get_items(order_id)
        ]

    @staticmethod
    def _to_dict(order: OrderModel, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": OrderStatus(order.status),
            "total_amount": Decimal(order.total_amount).quantize(CENT),
            "shipping_name": order.shipping_name,
            "shipping_phone": order.shipping_phone,
            "shipping_address": order.shipping_address,
            "payment_method": order.payment_method,
            "created_at": order.created_at,
            "items": [
                {**item, "subtotal": line_subtotal(item["unit_price"], item["quantity"])}
                for item in items
            ],
        }


def lines_with_names(lines: Tuple[CartLine, ...]) -> List[Dict[str, Any]]:
    return [
        {
            "product_id": line.product_id,
            "name": line.product_name,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
        }
        for line in lines
    ]
