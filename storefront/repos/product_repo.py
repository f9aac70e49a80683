# storefront/repos/product_repo.py
from decimal import Decimal
from typing import List

from sqlalchemy import exists, select, update
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderItemModel
from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_name(self, product_id: int) -> str | None:
        return self.db.execute(
            select(ProductModel.name).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def get_stock(self, product_id: int) -> int | None:
        # always hits the database, never the identity map
        return self.db.execute(
            select(ProductModel.stock).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def list_products(
        self,
        category: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[ProductModel]:
        stmt = select(ProductModel).order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        if category:
            stmt = stmt.where(ProductModel.category == category)
        # both bounds inclusive
        if min_price is not None:
            stmt = stmt.where(ProductModel.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(ProductModel.price <= max_price)
        return list(self.db.execute(stmt.limit(limit).offset(offset)).scalars().all())

    def list_categories(self) -> List[str]:
        stmt = (
            select(ProductModel.category)
            .where(ProductModel.category.is_not(None))
            .distinct()
            .order_by(ProductModel.category)
        )
        return list(self.db.execute(stmt).scalars().all())

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()

    def is_referenced_by_orders(self, product_id: int) -> bool:
        return self.db.execute(
            select(exists().where(OrderItemModel.product_id == product_id))
        ).scalar()

    def decrement_stock_if_available(self, product_id: int, quantity: int) -> int:
        """
        UPDATE products SET stock = stock - q WHERE id = :id AND stock >= q

        Returns the number of affected rows (0 or 1). The row lock taken by the
        UPDATE is held until the surrounding transaction ends.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def increment_stock(self, product_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=ProductModel.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
