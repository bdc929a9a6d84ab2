from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload, selectinload

from shop_api.filters.composer import FilterDescriptor
from shop_api.filters.sanitizer import CustomerSortField
from shop_api.filters.search import ADDRESS_MATCH_CAP, SearchMatcher
from shop_api.models.customer_models import User
from shop_api.models.order_models import Order, OrderProduct

SORT_COLUMNS = {
    CustomerSortField.CREATED_AT: User.created_at,
    CustomerSortField.TOTAL_AMOUNT: User.total_amount,
    CustomerSortField.ORDER_COUNT: User.order_count,
    CustomerSortField.LAST_ORDER_DATE: User.last_order_date,
    CustomerSortField.NAME: User.name,
}

_CUSTOMER_LOAD_OPTIONS = (
    selectinload(User.orders),
    selectinload(User.last_order).selectinload(Order.items).joinedload(OrderProduct.product),
    selectinload(User.last_order).joinedload(Order.customer),
)


class CustomerRepository:
    """Data Access Layer for customers (the `users` table)."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, customer_id: int) -> Optional[User]:
        return self.db.scalar(
            select(User).where(User.id == customer_id).options(*_CUSTOMER_LOAD_OPTIONS)
        )

    def order_ids_by_address(self, matcher: SearchMatcher, cap: int = ADDRESS_MATCH_CAP) -> List[int]:
        """Ids of (at most `cap`) orders whose delivery address contains the search term."""
        stmt = select(Order.id).where(matcher.contains(Order.delivery_address)).limit(cap)
        return list(self.db.scalars(stmt).all())

    def _where(self, descriptor: FilterDescriptor) -> list:
        clauses = descriptor.clauses(User)
        matcher = descriptor.matcher
        if matcher is not None:
            order_ids = self.order_ids_by_address(matcher)
            clauses.append(matcher.customer_clause(User.name, User.last_order_id, order_ids))
        return clauses

    def list(self, descriptor: FilterDescriptor) -> Tuple[List[User], int]:
        """One page of customers and the number of matching customers."""
        where = self._where(descriptor)
        sort_column = SORT_COLUMNS[descriptor.sort_field]

        stmt = (
            select(User)
            .where(*where)
            .options(*_CUSTOMER_LOAD_OPTIONS)
            .order_by(descriptor.order_by(sort_column), descriptor.order_by(User.id))
            .offset(descriptor.offset)
            .limit(descriptor.limit)
        )
        customers = list(self.db.scalars(stmt).all())
        total = self.db.scalar(select(func.count()).select_from(User).where(*where)) or 0
        return customers, total

    def update(self, customer: User, changes: Dict[str, Any]) -> User:
        for field, value in changes.items():
            setattr(customer, field, value)
        self.db.add(customer)
        self.db.commit()
        return self.get(customer.id)

    def delete(self, customer: User) -> None:
        """Deletes the customer together with their orders."""
        customer.last_order = None
        self.db.flush()
        self.db.delete(customer)
        self.db.commit()
