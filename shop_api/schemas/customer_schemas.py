from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from shop_api.schemas.base import CamelModel
from shop_api.schemas.order_schemas import OrderResponse, OrderSummary


class CustomerUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)


class CustomerResponse(CamelModel):
    id: int
    name: str
    email: str
    created_at: datetime
    total_amount: float
    order_count: int
    last_order_date: Optional[datetime] = None
    last_order: Optional[OrderResponse] = None
    orders: List[OrderSummary] = []


class CustomerPagination(CamelModel):
    total_customers: int
    total_pages: int
    current_page: int
    page_size: int


class CustomerListResponse(CamelModel):
    customers: List[CustomerResponse]
    pagination: CustomerPagination
