from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.data.database import get_db
from storefront.main import create_app
from storefront.services.order_service import OrderService

from helpers import RecordingNotifier


@pytest.fixture
def client(session_factory, monkeypatch):
    app = create_app(create_tables=False)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    # keep confirmations out of celery
    original_init = OrderService.__init__

    def init(self, db, notification_service=None):
        original_init(self, db, notification_service or RecordingNotifier())

    monkeypatch.setattr(OrderService, "__init__", init)

    with TestClient(app) as c:
        yield c


@pytest.fixture
def shop(client):
    assert client.post("/users/", json={"id": 1, "name": "Jan", "email": "jan@example.com"}).status_code == 200
    a = client.post("/products/", json={"name": "A", "price": "10.00", "stock": 5, "category": "misc"}).json()
    b = client.post("/products/", json={"name": "B", "price": "5.00", "stock": 3}).json()
    return {"a": a["id"], "b": b["id"]}


ORDER = {"shipping_name": "Jan", "shipping_phone": "600", "shipping_address": "Prosta 1"}


def _fill_cart(client, shop):
    assert client.post("/cart/items?user_id=1", json={"product_id": shop["a"], "quantity": 2}).status_code == 201
    assert client.post("/cart/items?user_id=1", json={"product_id": shop["b"], "quantity": 1}).status_code == 201


def test_health(client):
    body = client.get("/health").json()
    assert body["database"] == "ok"
    assert body["broker"] == "skipped"


def test_catalog_endpoints(client, shop):
    products = client.get("/products/").json()
    assert {p["name"] for p in products} == {"A", "B"}
    assert client.get("/products/categories").json() == ["misc"]
    assert client.get("/products/999").status_code == 404

    updated = client.put(f"/products/{shop['a']}", json={"price": "12.50"}).json()
    assert Decimal(updated["price"]) == Decimal("12.50")
    assert updated["stock"] == 5


def test_cart_endpoints(client, shop):
    _fill_cart(client, shop)

    cart = client.get("/cart/?user_id=1").json()
    assert Decimal(cart["total"]) == Decimal("25.00")

    too_many = client.put(f"/cart/items/{shop['b']}?user_id=1", json={"quantity": 10})
    assert too_many.status_code == 409

    cart = client.delete(f"/cart/items/{shop['b']}?user_id=1").json()
    assert [i["product_id"] for i in cart["items"]] == [shop["a"]]

    assert client.delete("/cart/?user_id=1").status_code == 204
    assert client.get("/cart/?user_id=1").json()["items"] == []


def test_invalid_quantity_is_rejected_by_validation(client, shop):
    r = client.post("/cart/items?user_id=1", json={"product_id": shop["a"], "quantity": 0})
    assert r.status_code == 422


def test_checkout_pay_and_cancel_flow(client, shop):
    _fill_cart(client, shop)

    r = client.post("/orders/?user_id=1", json=ORDER)
    assert r.status_code == 201
    order = r.json()
    assert order["status"] == "PENDING_PAYMENT"
    assert Decimal(order["total_amount"]) == Decimal("25.00")
    assert client.get("/cart/?user_id=1").json()["items"] == []
    assert client.get(f"/products/{shop['a']}").json()["stock"] == 3

    paid = client.post(f"/orders/{order['id']}/pay?user_id=1")
    assert paid.json()["status"] == "PAID"
    assert client.post(f"/orders/{order['id']}/pay?user_id=1").status_code == 409

    cancelled = client.put(f"/admin/orders/{order['id']}/status", json={"status": "CANCELLED"})
    assert cancelled.json()["status"] == "CANCELLED"
    assert client.put(f"/admin/orders/{order['id']}/status", json={"status": "CANCELLED"}).status_code == 200
    assert client.get(f"/products/{shop['a']}").json()["stock"] == 5

    revive = client.put(f"/admin/orders/{order['id']}/status", json={"status": "PAID"})
    assert revive.status_code == 409


def test_checkout_errors(client, shop):
    assert client.post("/orders/?user_id=1", json=ORDER).status_code == 400

    _fill_cart(client, shop)
    client.put(f"/products/{shop['a']}", json={"stock": 1})

    r = client.post("/orders/?user_id=1", json=ORDER)
    assert r.status_code == 409
    assert r.json()["detail"] == 'Insufficient stock for "A"'
    assert len(client.get("/cart/?user_id=1").json()["items"]) == 2


def test_orders_listing_and_privacy(client, shop):
    client.post("/users/", json={"id": 2, "name": "Ola", "email": "ola@example.com"})
    _fill_cart(client, shop)
    order = client.post("/orders/?user_id=1", json=ORDER).json()

    assert [o["id"] for o in client.get("/orders/?user_id=1").json()] == [order["id"]]
    assert client.get(f"/orders/{order['id']}?user_id=2").status_code == 404
    assert client.post(f"/orders/{order['id']}/pay?user_id=2").status_code == 404


def test_product_in_orders_cannot_be_deleted(client, shop):
    _fill_cart(client, shop)
    client.post("/orders/?user_id=1", json=ORDER)

    assert client.delete(f"/products/{shop['a']}").status_code == 409

    spare = client.post("/products/", json={"name": "Spare", "price": "1.00", "stock": 1}).json()
    assert client.delete(f"/products/{spare['id']}").status_code == 204


def test_admin_listing_and_statistics(client, shop):
    _fill_cart(client, shop)
    first = client.post("/orders/?user_id=1", json=ORDER).json()
    client.post(f"/orders/{first['id']}/pay?user_id=1")

    client.post("/cart/items?user_id=1", json={"product_id": shop["b"], "quantity": 1})
    client.post("/orders/?user_id=1", json=ORDER)

    page = client.get("/admin/orders").json()
    assert page["total"] == 2
    paid_only = client.get("/admin/orders?status=PAID").json()
    assert [o["id"] for o in paid_only["orders"]] == [first["id"]]

    stats = client.get("/admin/statistics").json()
    assert Decimal(stats["total_sales"]) == Decimal("25.00")
    counts = {row["status"]: row["count"] for row in stats["orders_by_status"]}
    assert counts["PAID"] == 1
    assert counts["PENDING_PAYMENT"] == 1
    top = stats["top_products"]
    assert top[0]["product_id"] == shop["a"]
    assert top[0]["quantity"] == 2
    assert Decimal(top[0]["revenue"]) == Decimal("20.00")


def test_unknown_order_status_is_rejected(client, shop):
    _fill_cart(client, shop)
    order = client.post("/orders/?user_id=1", json=ORDER).json()

    r = client.put(f"/admin/orders/{order['id']}/status", json={"status": "LOST"})
    assert r.status_code == 422
    assert client.put("/admin/orders/999/status", json={"status": "PAID"}).status_code == 404


def test_module_level_app_serves_every_router():
    from storefront.main import app

    assert isinstance(app, FastAPI)
    paths = {route.path for route in app.routes}
    assert {"/health", "/products/{product_id}", "/orders/", "/admin/users/{user_id}"} <= paths


def test_product_price_filter_and_view_trail(client, shop):
    cheap = client.get("/products/", params={"max_price": "5.00"}).json()
    assert [p["name"] for p in cheap] == ["B"]
    assert [p["name"] for p in client.get("/products/?min_price=6").json()] == ["A"]
    assert client.get("/products/?min_price=-1").status_code == 422

    assert client.get(f"/products/{shop['a']}?user_id=1").status_code == 200
    assert client.get(f"/products/{shop['b']}").status_code == 200

    logs = client.get("/admin/users/1").json()["logs"]
    assert [(log["action"], log["product_id"]) for log in logs] == [("VIEW_PRODUCT", shop["a"])]


def test_admin_users_endpoints(client, shop):
    client.post("/users/", json={"id": 2, "name": "Ola", "email": "ola@example.com"})
    _fill_cart(client, shop)
    order = client.post("/orders/?user_id=1", json=ORDER).json()

    page = client.get("/admin/users").json()
    assert page["total"] == 2
    assert [u["id"] for u in client.get("/admin/users?search=ola").json()["users"]] == [2]

    detail = client.get("/admin/users/1").json()
    assert detail["user"]["email"] == "jan@example.com"
    assert [o["id"] for o in detail["orders"]] == [order["id"]]
    assert {log["action"] for log in detail["logs"]} == {"PURCHASE"}
    assert len(detail["logs"]) == 2

    assert client.get("/admin/users/999").status_code == 404


def test_statistics_date_range(client, shop):
    _fill_cart(client, shop)
    order = client.post("/orders/?user_id=1", json=ORDER).json()
    client.post(f"/orders/{order['id']}/pay?user_id=1")
    now = datetime.now(timezone.utc)

    inside = client.get(
        "/admin/statistics",
        params={"start_date": (now - timedelta(hours=1)).isoformat(), "end_date": (now + timedelta(hours=1)).isoformat()},
    ).json()
    assert Decimal(inside["total_sales"]) == Decimal("25.00")

    later = client.get("/admin/statistics", params={"start_date": (now + timedelta(hours=1)).isoformat()}).json()
    assert Decimal(later["total_sales"]) == Decimal("0")
    assert later["top_products"] == []
