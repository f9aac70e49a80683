from sqlalchemy import select

from storefront.data.models import CartItemModel, OrderModel, ProductModel


class RecordingNotifier:
    """Stands in for NotificationService, keeps the calls."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_order_confirmation(self, recipient, order_id, total, items):
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.sent.append(
            {"recipient": recipient, "order_id": order_id, "total": total, "items": items}
        )


def stock_of(session, product_id: int) -> int:
    return session.execute(select(ProductModel.stock).where(ProductModel.id == product_id)).scalar_one()


def cart_of(session, user_id: int):
    rows = session.execute(
        select(CartItemModel.product_id, CartItemModel.quantity)
        .where(CartItemModel.user_id == user_id)
        .order_by(CartItemModel.product_id)
    ).all()
    return [tuple(r) for r in rows]


def order_count(session) -> int:
    return len(session.execute(select(OrderModel.id)).all())
