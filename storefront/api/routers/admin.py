# storefront/api/routers/admin.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.order_status import OrderStatus
from storefront.domain.schemas import (
    OrderOut,
    OrderPage,
    OrderStatusUpdate,
    SalesStatistics,
    UserDetail,
    UserPage,
)
from storefront.services.order_lifecycle import OrderLifecycleService
from storefront.services.order_service import OrderService
from storefront.services.user_service import UserService

# admin authorization happens before requests reach this service
router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/orders", response_model=OrderPage)
def list_orders(
    status: Optional[OrderStatus] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_all_orders(status=status, limit=limit, offset=offset)


@router.put("/orders/{order_id}/status", response_model=OrderOut)
def set_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
):
    """
    Moving an order into CANCELLED returns its items to stock, once.
    """
    try:
        return OrderLifecycleService(db).set_status(order_id, payload.status)
    except StorefrontError as e:
        raise to_http(e)


@router.get("/statistics", response_model=SalesStatistics)
def statistics(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
):
    return OrderService(db).sales_statistics(start=start_date, end=end_date)


@router.get("/users", response_model=UserPage)
def list_users(
    search: Optional[str] = Query(None, description="Substring of name or email"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return UserService(db).list_users(search=search, limit=limit, offset=offset)


@router.get("/users/{user_id}", response_model=UserDetail)
def get_user(user_id: int, db: Session = Depends(get_db)):
    try:
        return UserService(db).get_user_detail(user_id)
    except StorefrontError as e:
        raise to_http(e)
