"""
Builds one FilterDescriptor per list request and turns it into SQL clauses.

Independent fields are AND-ed, bounds of a single field share one interval.
Parameters that are not listed here are ignored.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.sql import ColumnElement

from shop_api.filters.ranges import Range, RangeFilterBuilder
from shop_api.filters.sanitizer import (
    CustomerSortField,
    OrderSortField,
    SortOrder,
    parse_status,
    safe_enum,
    safe_limit,
    safe_page,
    safe_search,
    safe_sort_order,
)
from shop_api.filters.search import SearchMatcher


@dataclass
class FilterDescriptor:
    page: int
    limit: int
    sort_field: Enum
    sort_order: SortOrder
    equals: Dict[str, Any] = field(default_factory=dict)
    ranges: Dict[str, Range] = field(default_factory=dict)
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def matcher(self) -> Optional[SearchMatcher]:
        return SearchMatcher(self.search) if self.search else None

    def clauses(self, model) -> List[ColumnElement]:
        """Equality and range predicates on `model` attributes (search excluded)."""
        out: List[ColumnElement] = []
        for name, value in self.equals.items():
            out.append(getattr(model, name) == value)
        for name, rng in self.ranges.items():
            out.extend(rng.clauses(getattr(model, name)))
        return out

    def order_by(self, column):
        return column.asc() if self.sort_order is SortOrder.ASC else column.desc()


def compose_customer_filters(params: Mapping[str, Any]) -> FilterDescriptor:
    """GET /customers?page=2&limit=5&sortField=totalAmount&sortOrder=desc&registrationDateFrom=...&search=..."""
    search = safe_search(params.get("search"))
    ranges = (
        RangeFilterBuilder(params)
        .date_range("created_at", "registrationDate")
        .date_range("last_order_date", "lastOrderDate")
        .number_range("total_amount", "totalAmount")
        .number_range("order_count", "orderCount")
        .build()
    )
    return FilterDescriptor(
        page=safe_page(params.get("page")),
        limit=safe_limit(params.get("limit")),
        sort_field=safe_enum(params.get("sortField"), CustomerSortField, CustomerSortField.CREATED_AT),
        sort_order=safe_sort_order(params.get("sortOrder")),
        ranges=ranges,
        search=search,
    )


def compose_order_filters(params: Mapping[str, Any]) -> FilterDescriptor:
    """GET /orders?page=2&limit=5&sortField=totalAmount&status=pending&orderDateFrom=...&search=%2B1"""
    search = safe_search(params.get("search"))
    equals: Dict[str, Any] = {}
    if params.get("status") is not None:
        equals["status"] = parse_status(params["status"])

    ranges = (
        RangeFilterBuilder(params)
        .number_range("total_amount", "totalAmount")
        .date_range("created_at", "orderDate")
        .build()
    )
    return FilterDescriptor(
        page=safe_page(params.get("page")),
        limit=safe_limit(params.get("limit")),
        sort_field=safe_enum(params.get("sortField"), OrderSortField, OrderSortField.CREATED_AT),
        sort_order=safe_sort_order(params.get("sortOrder")),
        equals=equals,
        ranges=ranges,
        search=search,
    )


def compose_own_order_filters(params: Mapping[str, Any]) -> FilterDescriptor:
    """Current user's orders: only search and pagination are honoured, newest first."""
    return FilterDescriptor(
        page=safe_page(params.get("page")),
        limit=safe_limit(params.get("limit"), default=5),
        sort_field=OrderSortField.CREATED_AT,
        sort_order=SortOrder.DESC,
        search=safe_search(params.get("search")),
    )
