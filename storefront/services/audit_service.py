# storefront/services/audit_service.py
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from storefront.data.models.activity_log import ActivityLogModel
from storefront.domain.cart_line import CartLine
from storefront.repos.activity_repo import ActivityRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PURCHASE = "PURCHASE"
VIEW_PRODUCT = "VIEW_PRODUCT"


class AuditService:
    """
    User activity trail. Writes run in their own transaction, after the
    business change they describe has been committed.
    """

    def __init__(self, db: Session):
        self.repo = ActivityRepo(db)

    def record_purchase(self, user_id: int, order_id: int, lines: Iterable[CartLine]) -> int:
        entries = [
            ActivityLogModel(
                user_id=user_id,
                action=PURCHASE,
                product_id=line.product_id,
                details={"order_id": order_id, "quantity": line.quantity},
            )
            for line in lines
        ]
        self._write(entries)

        logger.info(f"[AUDIT] User {user_id}: {len(entries)} purchase entries for order {order_id}")
        return len(entries)

    def record_view(self, user_id: int, product_id: int) -> None:
        self._write([ActivityLogModel(user_id=user_id, action=VIEW_PRODUCT, product_id=product_id, details={})])
        logger.debug(f"[AUDIT] User {user_id} viewed product {product_id}")

    def list_for_user(self, user_id: int, limit: int = 100) -> List[Dict[str, Any]]:
        return [
            {
                "id": log.id,
                "action": log.action,
                "product_id": log.product_id,
                "product_name": name,
                "details": log.details,
                "created_at": log.created_at,
            }
            for log, name in self.repo.list_for_user(user_id, limit=limit)
        ]

    def _write(self, entries: List[ActivityLogModel]) -> None:
        try:
            self.repo.add_entries(entries)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
