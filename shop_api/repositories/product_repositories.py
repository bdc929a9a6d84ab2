from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from shop_api.models.product_models import Product


class ProductRepository:
    """Read-only access to the catalog."""

    def __init__(self, db: Session):
        self.db = db

    def get_many(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Existing products among `product_ids`, keyed by id. Missing ids are simply absent."""
        ids = set(product_ids)
        if not ids:
            return {}
        rows = self.db.scalars(select(Product).where(Product.id.in_(ids))).all()
        return {p.id: p for p in rows}
