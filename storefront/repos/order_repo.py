# storefront/repos/order_repo.py
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderItemModel, OrderModel
from storefront.data.models.product import ProductModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel, items: List[OrderItemModel]) -> OrderModel:
        # flush only, the caller owns the transaction
        self.db.add(order)
        self.db.flush()
        for item in items:
            item.order_id = order.id
            self.db.add(item)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_items(self, order_id: int) -> List[Tuple[OrderItemModel, str | None]]:
        stmt = (
            select(OrderItemModel, ProductModel.name)
            .outerjoin(ProductModel, ProductModel.id == OrderItemModel.product_id)
            .where(OrderItemModel.order_id == order_id)
            .order_by(OrderItemModel.id)
        )
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def list_user_orders(self, user_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def list_orders(self, status: str | None = None, limit: int = 20, offset: int = 0) -> List[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        if status:
            stmt = stmt.where(OrderModel.status == status)
        return list(self.db.execute(stmt.limit(limit).offset(offset)).scalars().all())

    def count_orders(self, status: str | None = None) -> int:
        stmt = select(func.count(OrderModel.id))
        if status:
            stmt = stmt.where(OrderModel.status == status)
        return self.db.execute(stmt).scalar_one()

    def compare_and_set_status(self, order_id: int, expected: str, new_status: str) -> int:
        """
        Optimistic status change:
        UPDATE orders SET status = :new WHERE id = :id AND status = :expected
        Zero rows means somebody else changed the order first.
        """
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == expected)
            .values(status=new_status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def get_status(self, order_id: int) -> str | None:
        # column read, bypasses the identity map
        return self.db.execute(
            select(OrderModel.status).where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    @staticmethod
    def _in_period(stmt, start: datetime | None, end: datetime | None):
        # both bounds inclusive, on order creation time
        if start is not None:
            stmt = stmt.where(OrderModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(OrderModel.created_at <= end)
        return stmt

    def total_sales(self, statuses, start: datetime | None = None, end: datetime | None = None):
        stmt = select(func.coalesce(func.sum(OrderModel.total_amount), 0)).where(OrderModel.status.in_(statuses))
        return self.db.execute(self._in_period(stmt, start, end)).scalar_one()

    def count_by_status(self, start: datetime | None = None, end: datetime | None = None) -> Dict[str, int]:
        stmt = select(OrderModel.status, func.count(OrderModel.id)).group_by(OrderModel.status)
        rows = self.db.execute(self._in_period(stmt, start, end)).all()
        return {status: count for status, count in rows}

    def top_products(self, statuses, start: datetime | None = None, end: datetime | None = None, limit: int = 10):
        """
        (product_id, name, quantity sold, order count, revenue) by quantity.
        Revenue uses the captured line prices, not the current catalog price.
        """
        qty = func.sum(OrderItemModel.quantity)
        stmt = (
            select(
                OrderItemModel.product_id,
                ProductModel.name,
                qty.label("quantity"),
                func.count(func.distinct(OrderItemModel.order_id)).label("order_count"),
                func.sum(OrderItemModel.quantity * OrderItemModel.unit_price).label("revenue"),
            )
            .join(OrderModel, OrderModel.id == OrderItemModel.order_id)
            .outerjoin(ProductModel, ProductModel.id == OrderItemModel.product_id)
            .where(OrderModel.status.in_(statuses))
        )
        stmt = (
            self._in_period(stmt, start, end)
            .group_by(OrderItemModel.product_id, ProductModel.name)
            .order_by(qty.desc(), OrderItemModel.product_id)
            .limit(limit)
        )
        return self.db.execute(stmt).all()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
