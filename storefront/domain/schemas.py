# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Optional
from decimal import Decimal
from datetime import datetime

from storefront.domain.order_status import OrderStatus


class UserCreate(BaseModel):
    """Schema for creating a user."""

    id: int = Field(..., gt=0, description="User ID (must be > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")


class UserRead(BaseModel):
    """Schema for a user (response)."""

    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Schema for creating a product (admin)."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    category: Optional[str] = Field(None, max_length=100)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(..., ge=0)


class ProductUpdate(BaseModel):
    """Partial update, only the fields that are sent are changed."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    category: Optional[str] = None
    price: Decimal
    stock: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")


class QuantityIn(BaseModel):
    quantity: int = Field(..., gt=0)


class CartItemOut(BaseModel):
    """Schema for a cart line (response)."""

    product_id: int
    name: str
    quantity: int
    price: Decimal
    stock: int
    subtotal: Decimal


class CartOut(BaseModel):
    """Schema for a cart (response)."""

    user_id: int
    items: List[CartItemOut]
    total: Decimal


class OrderCreate(BaseModel):
    """Schema for placing an order from the current cart."""

    shipping_name: str = Field(..., min_length=1, max_length=200)
    shipping_phone: str = Field(..., min_length=1, max_length=50)
    shipping_address: str = Field(..., min_length=1, max_length=500)
    payment_method: Optional[str] = Field(None, max_length=50)


class OrderItemOut(BaseModel):
    product_id: int
    name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    shipping_name: str
    shipping_phone: str
    shipping_address: str
    payment_method: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut] = []


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderPage(BaseModel):
    orders: List[OrderOut]
    total: int
    limit: int
    offset: int


class StatusCount(BaseModel):
    status: OrderStatus
    count: int


class TopProduct(BaseModel):
    product_id: int
    name: Optional[str] = None
    quantity: int
    order_count: int
    revenue: Decimal


class SalesStatistics(BaseModel):
    total_sales: Decimal
    orders_by_status: List[StatusCount]
    top_products: List[TopProduct]


# admin user views
class UserPage(BaseModel):
    users: List[UserRead]
    total: int
    limit: int
    offset: int


class ActivityLogOut(BaseModel):
    id: int
    action: str
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    details: Dict[str, Any] = {}
    created_at: datetime


class UserDetail(BaseModel):
    """User with their orders and latest activity."""

    user: UserRead
    orders: List[OrderOut]
    logs: List[ActivityLogOut]
