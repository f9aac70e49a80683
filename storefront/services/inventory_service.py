# storefront/services/inventory_service.py
from sqlalchemy.orm import Session

from storefront.domain.errors import InsufficientStock, NotFound
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryLedger:
    """
    Per-product stock counters.

    reserve/release never commit, they run inside the caller's transaction.
    The conditional UPDATE in reserve is the only thing that decides whether
    stock is available; reads done earlier by the caller are advisory.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def reserve(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        rowcount = self.repo.decrement_stock_if_available(product_id, quantity)

        if rowcount == 0:
            name = self.repo.get_name(product_id)
            if name is None:
                raise NotFound("Product", product_id)
            logger.warning(f"Reserve rejected: product {product_id} ({name}) has less than {quantity} in stock")
            raise InsufficientStock(name, product_id)

        logger.info(f"Reserved {quantity} of product {product_id}")

    def release(self, product_id: int, quantity: int) -> None:
        # no upper bound check, callers release only what they reserved
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        rowcount = self.repo.increment_stock(product_id, quantity)

        if rowcount == 0:
            raise NotFound("Product", product_id)

        logger.info(f"Released {quantity} of product {product_id}")

    def available(self, product_id: int) -> int:
        stock = self.repo.get_stock(product_id)
        if stock is None:
            raise NotFound("Product", product_id)
        return stock
