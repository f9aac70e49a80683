# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.cart_line import ShippingInfo
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import OrderCreate, OrderOut
from storefront.services.order_lifecycle import OrderLifecycleService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Places an order from the user's current cart.
    The confirmation email is sent asynchronously.
    """
    svc = get_service(db)
    shipping = ShippingInfo(
        name=payload.shipping_name,
        phone=payload.shipping_phone,
        address=payload.shipping_address,
        payment_method=payload.payment_method,
    )
    try:
        return svc.place_order(user_id, shipping)
    except StorefrontError as e:
        raise to_http(e)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).list_orders(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.get_order(order_id, user_id)
    except StorefrontError as e:
        raise to_http(e)


@router.post("/{order_id}/pay", response_model=OrderOut)
def pay_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Simulated payment: PENDING_PAYMENT -> PAID.
    """
    try:
        return OrderLifecycleService(db).pay(order_id, user_id)
    except StorefrontError as e:
        raise to_http(e)
