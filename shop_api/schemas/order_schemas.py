from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from shop_api.models.order_models import OrderStatus
from shop_api.schemas.base import CamelModel


class ProductResponse(CamelModel):
    id: int
    title: str
    price: Optional[float] = None


class CustomerSummary(CamelModel):
    id: int
    name: str
    email: str


class OrderCreate(CamelModel):
    """Checkout body. `total` is the client's claim and is only compared, never stored."""

    address: str = Field(..., min_length=1, max_length=255)
    payment: str = Field(..., min_length=1, max_length=32)
    phone: str
    total: float
    email: str = Field(..., min_length=3, max_length=255)
    items: List[int]
    comment: Optional[str] = None


class OrderUpdate(CamelModel):
    status: OrderStatus


class OrderSummary(CamelModel):
    id: int
    order_number: int
    status: OrderStatus
    total_amount: float
    created_at: datetime


class OrderResponse(OrderSummary):
    delivery_address: str
    phone: str
    email: str
    comment: str
    payment: str
    products: List[ProductResponse] = []
    customer: Optional[CustomerSummary] = None


class OrderPagination(CamelModel):
    total_orders: int
    total_pages: int
    current_page: int
    page_size: int


class OrderListResponse(CamelModel):
    orders: List[OrderResponse]
    pagination: OrderPagination
