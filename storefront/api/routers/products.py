# storefront/api/routers/products.py
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import ProductCreate, ProductOut, ProductUpdate
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[ProductOut])
def list_products(
    category: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return ProductService(db).list_products(
        category=category, min_price=min_price, max_price=max_price, limit=limit, offset=offset
    )


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    return ProductService(db).list_categories()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    user_id: Optional[int] = Query(None, description="Viewer, recorded in the activity trail"),
    db: Session = Depends(get_db),
):
    try:
        return ProductService(db).get_product(product_id, user_id=user_id)
    except StorefrontError as e:
        raise to_http(e)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    """
    Admin. Authorization is handled in front of this service.
    """
    return ProductService(db).create_product(payload)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    try:
        return ProductService(db).update_product(product_id, payload)
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    try:
        ProductService(db).delete_product(product_id)
    except StorefrontError as e:
        raise to_http(e)
