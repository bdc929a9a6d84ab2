"""
Server-side rebuild of a checkout basket.

Nothing the client claims about money is stored: every item is looked up in
the catalog, the total is recomputed from catalog prices and must equal the
declared total exactly. All checks run before anything is written.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import bleach

from shop_api.core.errors import BadRequestError
from shop_api.models.product_models import Product
from shop_api.repositories.product_repositories import ProductRepository
from shop_api.schemas.order_schemas import OrderCreate

logger = logging.getLogger(__name__)

MAX_ITEMS = 50
MAX_PHONE_LENGTH = 20
PHONE_PATTERN = re.compile(r"\+?\d{10,15}", re.ASCII)


@dataclass
class ValidatedOrder:
    products: List[Product]
    total_amount: float
    delivery_address: str
    phone: str
    email: str
    payment: str
    comment: str


def check_items(items: Any) -> List[Any]:
    if not isinstance(items, list):
        raise BadRequestError("items must be a list")
    if not 1 <= len(items) <= MAX_ITEMS:
        raise BadRequestError(f"Invalid number of items (1-{MAX_ITEMS})")
    return items


def normalize_phone(phone: Any) -> str:
    if not isinstance(phone, str):
        raise BadRequestError("Phone must be a string")
    normalized = phone.strip()
    if len(normalized) > MAX_PHONE_LENGTH:
        raise BadRequestError("Phone is too long")
    if not PHONE_PATTERN.fullmatch(normalized):
        raise BadRequestError("Invalid phone")
    return normalized


def sanitize_comment(comment: Optional[str]) -> str:
    """Drops every tag and attribute, keeps the text."""
    return bleach.clean(comment or "", tags=set(), attributes={}, strip=True)


def build_basket(items: Sequence[int], catalog: Mapping[int, Product]) -> List[Product]:
    """
    One catalog product per basket entry. A repeated id stays repeated.

    Fails on the first entry that is unknown or has no price.
    """
    basket: List[Product] = []
    for product_id in items:
        product = catalog.get(product_id)
        if product is None:
            raise BadRequestError(f"Product {product_id} not found")
        if product.price is None:
            raise BadRequestError(f"Product {product_id} is not for sale")
        basket.append(product)
    return basket


def basket_total(basket: Sequence[Product]) -> float:
    return sum(p.price for p in basket)


class OrderCreationValidator:
    def __init__(self, products: ProductRepository):
        self.products = products

    def validate(self, order_in: OrderCreate) -> ValidatedOrder:
        items = check_items(order_in.items)
        phone = normalize_phone(order_in.phone)

        catalog = self.products.get_many(items)
        basket = build_basket(items, catalog)

        total = basket_total(basket)
        if total != order_in.total:
            logger.info(
                "basket total mismatch",
                extra={"declared_total": order_in.total, "basket_total": total},
            )
            raise BadRequestError("Order total does not match the basket")

        return ValidatedOrder(
            products=basket,
            total_amount=total,
            delivery_address=order_in.address,
            phone=phone,
            email=order_in.email,
            payment=order_in.payment,
            comment=sanitize_comment(order_in.comment),
        )
