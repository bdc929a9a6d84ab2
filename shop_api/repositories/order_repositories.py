from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload, selectinload

from shop_api.filters.composer import FilterDescriptor
from shop_api.models.customer_models import User
from shop_api.models.order_models import Order, OrderProduct, OrderStatus
from shop_api.models.product_models import Product
from shop_api.repositories.order_pipeline import OrderListPipeline

logger = logging.getLogger(__name__)

_ORDER_LOAD_OPTIONS = (
    selectinload(Order.items).joinedload(OrderProduct.product),
    joinedload(Order.customer),
)


class OrderRepository:
    """Data Access Layer for Order and OrderProduct models."""

    def __init__(self, db: Session):
        self.db = db

    # ---------- READ ----------
    def get(self, order_id: int) -> Optional[Order]:
        """Get an order by its internal id."""
        return self.db.scalar(
            select(Order).where(Order.id == order_id).options(*_ORDER_LOAD_OPTIONS)
        )

    def get_by_number(self, order_number: int) -> Optional[Order]:
        """Get an order by its public number."""
        return self.db.scalar(
            select(Order).where(Order.order_number == order_number).options(*_ORDER_LOAD_OPTIONS)
        )

    def list(
        self, descriptor: FilterDescriptor, customer_id: Optional[int] = None
    ) -> Tuple[List[Order], int]:
        """One page of orders and the number of matching orders."""
        pipeline = OrderListPipeline(descriptor, customer_id=customer_id)
        total = self.db.scalar(pipeline.count_branch()) or 0
        page_ids = [row[0] for row in self.db.execute(pipeline.data_branch())]
        return self._load_in_order(page_ids), total

    def _load_in_order(self, order_ids: Sequence[int]) -> List[Order]:
        if not order_ids:
            return []
        rows = self.db.scalars(
            select(Order).where(Order.id.in_(order_ids)).options(*_ORDER_LOAD_OPTIONS)
        ).all()
        by_id = {o.id: o for o in rows}
        return [by_id[i] for i in order_ids if i in by_id]

    # ---------- CREATE ----------
    def next_order_number(self) -> int:
        current = self.db.scalar(select(func.coalesce(func.max(Order.order_number), 0)))
        return int(current) + 1

    def create(
        self,
        customer: User,
        products: Sequence[Product],
        total_amount: float,
        delivery_address: str,
        phone: str,
        email: str,
        payment: str,
        comment: str,
    ) -> Order:
        """Insert an order with one product row per basket entry, in basket order."""
        order = Order(
            order_number=self.next_order_number(),
            status=OrderStatus.CREATED,
            total_amount=total_amount,
            customer=customer,
            delivery_address=delivery_address,
            phone=phone,
            email=email,
            payment=payment,
            comment=comment,
            items=[
                OrderProduct(product_id=p.id, position=i)
                for i, p in enumerate(products)
            ],
        )
        self.db.add(order)
        self.db.flush()
        self._refresh_customer_stats(customer)
        self.db.commit()
        logger.info("order persisted", extra={"order_number": order.order_number, "customer_id": customer.id})
        return self.get(order.id)

    # ---------- UPDATE ----------
    def update_status(self, order: Order, status: OrderStatus) -> Order:
        order.status = status
        self.db.add(order)
        self.db.commit()
        return self.get(order.id)

    # ---------- DELETE ----------
    def delete(self, order: Order) -> None:
        customer = order.customer
        self.db.delete(order)
        self.db.flush()
        if customer is not None:
            self._refresh_customer_stats(customer)
        self.db.commit()

    # ---------- Customer aggregates ----------
    def _refresh_customer_stats(self, customer: User) -> None:
        """Recomputes order_count, total_amount and the last order from the order history."""
        self.db.refresh(customer, attribute_names=["orders"])
        orders = customer.orders
        last = max(orders, key=lambda o: (o.created_at, o.order_number), default=None)

        customer.order_count = len(orders)
        customer.total_amount = sum(o.total_amount for o in orders)
        customer.last_order = last
        customer.last_order_date = last.created_at if last else None
        self.db.flush()
