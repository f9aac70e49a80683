from decimal import Decimal
from typing import Dict, Any, Tuple
from sqlalchemy.orm import Session
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.cart_line import CartLine
from storefront.domain.errors import InsufficientStock, NotFound
from storefront.domain.pricing import line_subtotal, order_total
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

class CartService:
    """
    Cart use cases, one cart per user.
    commands (add, update, remove, clear) change state
    queries (get_cart, snapshot) only read
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    #queries
    def snapshot(self, user_id: int) -> Tuple[CartLine, ...]:
        """
        Immutable view of the cart at checkout time.

        Product rows are read fresh (price, stock, name), lines are ordered by
        product id so that stock rows are always locked in the same order.
        """
        rows = self.repo.get_lines_with_products(user_id)
        lines = [
            CartLine(
                product_id=product.id,
                product_name=product.name,
                unit_price=Decimal(product.price),
                stock=product.stock,
                quantity=item.quantity,
            )
            for item, product in rows
        ]
        return tuple(sorted(lines, key=lambda line: line.product_id))

    def get_cart(self, user_id: int) -> Dict[str, Any]:
        rows = self.repo.get_lines_with_products(user_id)

        #dict -> CartOut
        return {
            "user_id": user_id,
            "items": [
                {
                    "product_id": product.id,
                    "name": product.name,
                    "quantity": item.quantity,
                    "price": product.price,
                    "stock": product.stock,
                    "subtotal": line_subtotal(product.price, item.quantity),
                }
                for item, product in rows
            ],
            "total": order_total((product.price, item.quantity) for item, product in rows),
        }

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        if not self.users.get_user(user_id):
            raise NotFound("User", user_id)

        product = self.products.get_product(product_id)
        if not product:
            raise NotFound("Product", product_id)

        existing_item = self.repo.get_cart_item(user_id, product_id)
        new_quantity = quantity + (existing_item.quantity if existing_item else 0)

        # soft check, checkout validates again
        if product.stock < new_quantity:
            raise InsufficientStock(product.name, product.id)

        try:
            if existing_item:
                logger.info(
                    f"Product {product_id} already in cart of user {user_id}, "
                    f"quantity {existing_item.quantity} -> {new_quantity}"
                )
                existing_item.quantity = new_quantity
            else:
                logger.info(f"Adding product {product_id} to cart of user {user_id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        user_id=user_id,
                        product_id=product_id,
                        quantity=quantity,
                    )
                )
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return self.get_cart(user_id)

    def update_quantity(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        item = self.repo.get_cart_item(user_id, product_id)
        if not item:
            raise NotFound("Cart item", product_id)

        product = self.products.get_product(product_id)
        if product.stock < quantity:
            raise InsufficientStock(product.name, product.id)

        try:
            item.quantity = quantity
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Cart of user {user_id}: product {product_id} quantity set to {quantity}")

        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        rowcount = self.repo.delete_cart_item(user_id, product_id)

        if rowcount == 0:
            self.repo.rollback()
            raise NotFound("Cart item", product_id)

        self.repo.commit()

        logger.info(f"Product {product_id} removed from cart of user {user_id}")

        return self.get_cart(user_id)

    def clear_cart(self, user_id: int) -> int:
        removed = self.repo.clear(user_id)
        self.repo.commit()

        logger.info(f"Cart of user {user_id} cleared, {removed} lines removed")

        return removed
