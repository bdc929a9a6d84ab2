from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, func, Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shop_api.core.database import Base

if TYPE_CHECKING:
    from shop_api.models.customer_models import User
    from shop_api.models.product_models import Product


class OrderStatus(str, Enum):
    CREATED = "created"
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    order_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False, index=True)
    status: Mapped[OrderStatus] = mapped_column(
        SqlEnum(OrderStatus, name="order_status", native_enum=False,
                values_callable=lambda e: [m.value for m in e]),
        default=OrderStatus.CREATED,
        nullable=False,
    )
    total_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    customer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    delivery_address: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    payment: Mapped[str] = mapped_column(String(32), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    customer: Mapped["User"] = relationship(
        back_populates="orders", foreign_keys=[customer_id]
    )
    # One row per purchased unit, in basket order
    items: Mapped[List["OrderProduct"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderProduct.position",
    )

    @property
    def products(self) -> List["Product"]:
        return [item.product for item in self.items]


class OrderProduct(Base):
    __tablename__ = "order_products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped[Optional["Product"]] = relationship(lazy="joined")
