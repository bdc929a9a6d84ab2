from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shop_api.core.database import Base
from shop_api.models.order_models import Order


class User(Base):
    """A customer. Aggregates are maintained by the order repository."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    total_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_order_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_order_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("orders.id", use_alter=True, name="fk_users_last_order_id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False, index=True
    )

    orders: Mapped[List[Order]] = relationship(
        back_populates="customer",
        foreign_keys=[Order.customer_id],
        order_by=Order.order_number,
        cascade="all, delete-orphan",
    )
    last_order: Mapped[Optional[Order]] = relationship(
        foreign_keys=[last_order_id],
        post_update=True,
    )
