# storefront/services/order_lifecycle.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.domain.errors import ConcurrentModification, NotFound
from storefront.domain.order_status import OrderStatus, check_payment, check_transition, restocks
from storefront.repos.order_repo import OrderRepo
from storefront.services.inventory_service import InventoryLedger
from storefront.services.order_service import OrderService
from storefront.utils.logging import get_logger
from storefront.utils.retry import db_retry

logger = get_logger(__name__)


class OrderLifecycleService:
    """
    Status changes after an order exists.

    PENDING_PAYMENT -> PAID -> SHIPPED -> COMPLETED, CANCELLED from any
    non-terminal state. Entering CANCELLED returns every line to stock in the
    same transaction as the status write; the write is a compare-and-set on
    the observed status, so two cancellations can never both restock.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.inventory = InventoryLedger(db)
        self.orders = OrderService(db)

    def pay(self, order_id: int, user_id: int) -> Dict[str, Any]:
        """
        Use Case: simulated payment, PENDING_PAYMENT -> PAID only.
        """
        order = self.repo.get_order(order_id)

        if not order or order.user_id != user_id:
            self.db.rollback()
            raise NotFound("Order", order_id)

        current = OrderStatus(order.status)
        try:
            check_payment(current)
            if not self._write_status(order_id, current, OrderStatus.PAID):
                # paid by a concurrent request, a second payment is never a no-op
                raise ConcurrentModification(order_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order_id} paid by user {user_id}")

        return self.orders.get_order(order_id, user_id)

    @db_retry()
    def set_status(self, order_id: int, new_status: OrderStatus) -> Dict[str, Any]:
        """
        Use Case: administrative status change.

        Same status -> no-op. Leaving a terminal state or moving backwards ->
        InvalidTransition. First entry into CANCELLED -> restock.
        """
        new_status = OrderStatus(new_status)
        order = self.repo.get_order(order_id)

        if not order:
            self.db.rollback()
            raise NotFound("Order", order_id)

        current = OrderStatus(order.status)

        try:
            if not check_transition(current, new_status):
                logger.info(f"Order {order_id} already {current.value}, nothing to do")
                self.db.rollback()
                return self.orders.get_order_admin(order_id)

            if not self._write_status(order_id, current, new_status):
                logger.info(f"Order {order_id} was set to {new_status.value} concurrently, nothing to do")
                self.db.rollback()
                return self.orders.get_order_admin(order_id)

            if restocks(current, new_status):
                self._restock(order_id)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order_id} status {current.value} -> {new_status.value}")

        return self.orders.get_order_admin(order_id)

    def _write_status(self, order_id: int, current: OrderStatus, new_status: OrderStatus) -> bool:
        """
        Compare-and-set from the observed status. False when another writer
        already moved the order to new_status, ConcurrentModification when it
        moved anywhere else.
        """
        rowcount = self.repo.compare_and_set_status(order_id, current.value, new_status.value)
        if rowcount:
            return True

        if self.repo.get_status(order_id) == new_status.value:
            return False

        raise ConcurrentModification(order_id)

    def _restock(self, order_id: int):
        for item, _name in self.repo.get_items(order_id):
            self.inventory.release(item.product_id, item.quantity)
        logger.info(f"Order {order_id} cancelled, stock released")
