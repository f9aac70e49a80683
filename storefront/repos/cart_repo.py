# storefront/repos/cart_repo.py
from typing import List, Tuple

from sqlalchemy import and_, delete, select
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_item(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_lines_with_products(self, user_id: int) -> List[Tuple[CartItemModel, ProductModel]]:
        # populate_existing: catalog rows are re-read, not served from the identity map
        stmt = (
            select(CartItemModel, ProductModel)
            .join(ProductModel, ProductModel.id == CartItemModel.product_id)
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.created_at.desc(), CartItemModel.id.desc())
            .execution_options(populate_existing=True)
        )
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, user_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_exact_lines(self, user_id: int, lines: List[Tuple[int, int]]) -> int:
        """
        Delete cart lines matching (product_id, quantity) pairs exactly.
        A line whose quantity changed in the meantime is not deleted.
        """
        deleted = 0
        for product_id, quantity in lines:
            result = self.db.execute(
                delete(CartItemModel)
                .where(
                    and_(
                        CartItemModel.user_id == user_id,
                        CartItemModel.product_id == product_id,
                        CartItemModel.quantity == quantity,
                    )
                )
                .execution_options(synchronize_session=False)
            )
            deleted += result.rowcount
        return deleted

    def delete_product_lines(self, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.product_id == product_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def clear(self, user_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
