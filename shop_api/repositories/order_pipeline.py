"""
Order listing as a flatten / filter / regroup pipeline.

Orders reference a variable number of products and a search has to look at
every product title, so the orders are first flattened to one row per
(order, product) with the customer joined in, filtered, and only then folded
back to one row per order. Both branches start from the same prefix, which
keeps the reported total in line with the pages actually served.

The joins are inner joins: an order without products, or whose customer is
gone, does not appear in the listing at all.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import Select, func, select

from shop_api.filters.composer import FilterDescriptor
from shop_api.filters.sanitizer import OrderSortField
from shop_api.models.customer_models import User
from shop_api.models.order_models import Order, OrderProduct
from shop_api.models.product_models import Product

SORT_COLUMNS = {
    OrderSortField.CREATED_AT: Order.created_at,
    OrderSortField.TOTAL_AMOUNT: Order.total_amount,
    OrderSortField.ORDER_NUMBER: Order.order_number,
    OrderSortField.STATUS: Order.status,
}


class OrderListPipeline:
    def __init__(self, descriptor: FilterDescriptor, customer_id: Optional[int] = None):
        self.descriptor = descriptor
        self.customer_id = customer_id

    @property
    def sort_column(self):
        return SORT_COLUMNS[self.descriptor.sort_field]

    def shared_prefix(self) -> Select:
        """Order-level match, flatten over products and customer, then search."""
        stmt = (
            select(Order.id)
            .join(OrderProduct, OrderProduct.order_id == Order.id)
            .join(Product, Product.id == OrderProduct.product_id)
            .join(User, User.id == Order.customer_id)
            .where(*self.descriptor.clauses(Order))
        )
        if self.customer_id is not None:
            stmt = stmt.where(Order.customer_id == self.customer_id)

        matcher = self.descriptor.matcher
        if matcher is not None:
            stmt = stmt.where(matcher.order_clause(Product.title, Order.order_number))
        return stmt

    def count_branch(self) -> Select:
        """Number of distinct orders left after flattening and searching."""
        per_order = self.shared_prefix().distinct().subquery()
        return select(func.count()).select_from(per_order)

    def data_branch(self) -> Select:
        """Order ids of the requested page, in display order."""
        d = self.descriptor
        sort_column = self.sort_column
        return (
            self.shared_prefix()
            .add_columns(sort_column)
            .distinct()
            .order_by(d.order_by(sort_column), d.order_by(Order.id))
            .offset(d.offset)
            .limit(d.limit)
        )
