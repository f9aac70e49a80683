from sqlalchemy import func, select

from storefront.data.models import ProductModel
from storefront.data.seed import DEMO_PRODUCTS, seed


def test_seed_fills_empty_catalog_once(db, session_factory):
    assert seed(session_factory) is True
    assert seed(session_factory) is False

    count = db.execute(select(func.count(ProductModel.id))).scalar_one()
    assert count == len(DEMO_PRODUCTS)
