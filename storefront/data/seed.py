# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal
from storefront.data.models import ProductModel, UserModel

DEMO_PRODUCTS = [
    {"name": "Keyboard", "category": "peripherals", "price": Decimal("199.99"), "stock": 25},
    {"name": "Mouse", "category": "peripherals", "price": Decimal("49.50"), "stock": 40},
    {"name": "Monitor", "category": "displays", "price": Decimal("899.00"), "stock": 8},
]

DEMO_USER = {"id": 1, "name": "Demo", "email": "demo@storefront.local"}


def seed(session_factory=SessionLocal) -> bool:
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return False
        db.add_all(ProductModel(**p) for p in DEMO_PRODUCTS)
        if not db.get(UserModel, DEMO_USER["id"]):
            db.add(UserModel(**DEMO_USER))
        db.commit()
        return True
    finally:
        db.close()


if __name__ == "__main__":
    from storefront.data.database import init_db

    init_db()
    seed()
