from __future__ import annotations

from typing import Optional

from sqlalchemy import Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from shop_api.core.database import Base


class Product(Base):
    """Catalog entry, owned by the catalog service. A null price means not for sale."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
