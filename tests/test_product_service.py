from decimal import Decimal

import pytest
from sqlalchemy import select

from storefront.data.models import ActivityLogModel, ProductModel
from storefront.domain.errors import NotFound
from storefront.domain.schemas import ProductUpdate
from storefront.services.product_service import ProductService


@pytest.fixture
def catalog(make_product):
    return {
        "cheap": make_product("Cheap", "5.00", 10, category="misc"),
        "mid": make_product("Mid", "20.00", 10, category="misc"),
        "dear": make_product("Dear", "99.99", 10, category="gifts"),
    }


def _names(products):
    return sorted(p.name for p in products)


def _activity(db, user_id):
    return db.execute(
        select(ActivityLogModel.action, ActivityLogModel.product_id).where(ActivityLogModel.user_id == user_id)
    ).all()


def test_price_range_bounds_are_inclusive(db, catalog):
    svc = ProductService(db)

    assert _names(svc.list_products(min_price=Decimal("20.00"))) == ["Dear", "Mid"]
    assert _names(svc.list_products(max_price=Decimal("20.00"))) == ["Cheap", "Mid"]
    assert _names(svc.list_products(min_price=Decimal("6"), max_price=Decimal("50"))) == ["Mid"]
    assert svc.list_products(min_price=Decimal("100")) == []


def test_price_range_combines_with_category(db, catalog):
    products = ProductService(db).list_products(category="misc", min_price=Decimal("10.00"))
    assert _names(products) == ["Mid"]


def test_view_by_known_user_is_recorded(db, catalog, make_user):
    user = make_user(1)

    product = ProductService(db).get_product(catalog["mid"], user_id=user)

    assert product.name == "Mid"
    assert _activity(db, user) == [("VIEW_PRODUCT", catalog["mid"])]


def test_anonymous_or_unknown_viewer_is_not_recorded(db, catalog):
    svc = ProductService(db)

    svc.get_product(catalog["mid"])
    svc.get_product(catalog["mid"], user_id=404)

    assert db.execute(select(ActivityLogModel)).scalars().all() == []


def test_failed_view_record_does_not_fail_the_read(db, catalog, make_user, monkeypatch):
    user = make_user(1)
    svc = ProductService(db)

    def broken(*args, **kwargs):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(svc.audit, "record_view", broken)

    assert svc.get_product(catalog["cheap"], user_id=user).price == Decimal("5.00")


def test_unknown_product_is_not_found(db, make_user):
    user = make_user(1)
    with pytest.raises(NotFound):
        ProductService(db).get_product(999, user_id=user)
    assert _activity(db, user) == []


def test_failed_update_is_rolled_back(db, catalog, monkeypatch):
    svc = ProductService(db)

    def broken_commit():
        raise RuntimeError("connection lost")

    monkeypatch.setattr(svc.repo, "commit", broken_commit)

    with pytest.raises(RuntimeError):
        svc.update_product(catalog["mid"], ProductUpdate(price=Decimal("25.00")))

    assert db.get(ProductModel, catalog["mid"]).price == Decimal("20.00")


def test_activity_log_points_at_products():
    targets = {fk.target_fullname for fk in ActivityLogModel.__table__.c.product_id.foreign_keys}
    assert targets == {"products.id"}
