# storefront/services/product_service.py
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFound, ProductInUse
from storefront.domain.schemas import ProductCreate, ProductUpdate
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.audit_service import AuditService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    """
    Catalog reads and admin edits.
    Stock changes made by checkout/cancellation go through InventoryLedger.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.carts = CartRepo(db)
        self.users = UserRepo(db)
        self.audit = AuditService(db)

    def list_products(
        self,
        category: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[ProductModel]:
        return self.repo.list_products(
            category=category, min_price=min_price, max_price=max_price, limit=limit, offset=offset
        )

    def list_categories(self) -> List[str]:
        return self.repo.list_categories()

    def get_product(self, product_id: int, user_id: int | None = None) -> ProductModel:
        """
        With a known user_id the view is written to the activity trail.
        A failed trail write never fails the read.
        """
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Product", product_id)

        if user_id is not None and self.users.get_email(user_id) is not None:
            try:
                self.audit.record_view(user_id, product_id)
            except Exception:
                logger.exception(f"Failed to record view of product {product_id} by user {user_id}")

        return product

    def create_product(self, payload: ProductCreate) -> ProductModel:
        product = self.repo.add_product(ProductModel(**payload.model_dump()))
        self.repo.commit()

        logger.info(f"Product {product.id} ({product.name}) created")
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductModel:
        product = self.get_product(product_id)

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        try:
            for field, value in changes.items():
                setattr(product, field, value)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)

        # order lines keep a price snapshot but still point at the product
        if self.repo.is_referenced_by_orders(product_id):
            raise ProductInUse(product_id)

        try:
            self.carts.delete_product_lines(product_id)
            self.repo.delete_product(product)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Product {product_id} deleted")
