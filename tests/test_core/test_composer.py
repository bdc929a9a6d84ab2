from datetime import datetime

import pytest

from shop_api.core.errors import BadRequestError
from shop_api.filters.composer import (
    compose_customer_filters,
    compose_order_filters,
    compose_own_order_filters,
)
from shop_api.filters.ranges import Range
from shop_api.filters.sanitizer import CustomerSortField, OrderSortField, SortOrder
from shop_api.models import Order, OrderStatus


def test_customer_defaults():
    d = compose_customer_filters({})
    assert (d.page, d.limit, d.offset) == (1, 10, 0)
    assert d.sort_field is CustomerSortField.CREATED_AT
    assert d.sort_order is SortOrder.DESC
    assert d.ranges == {} and d.equals == {} and d.search is None
    assert d.matcher is None


def test_customer_full_query():
    d = compose_customer_filters({
        "page": "2", "limit": "5", "sortField": "totalAmount", "sortOrder": "asc",
        "registrationDateFrom": "2023-01-01", "registrationDateTo": "2023-12-31",
        "lastOrderDateFrom": "2023-01-01", "lastOrderDateTo": "2023-12-31",
        "totalAmountFrom": "100", "totalAmountTo": "1000",
        "orderCountFrom": "1", "orderCountTo": "10",
        "search": " Ivan ",
    })
    assert (d.page, d.limit, d.offset) == (2, 5, 5)
    assert d.sort_field is CustomerSortField.TOTAL_AMOUNT
    assert d.sort_order is SortOrder.ASC
    assert d.ranges["created_at"] == Range(datetime(2023, 1, 1), datetime(2023, 12, 31, 23, 59, 59, 999000))
    assert d.ranges["last_order_date"].lte == datetime(2023, 12, 31, 23, 59, 59, 999000)
    assert d.ranges["total_amount"] == Range(100.0, 1000.0)
    assert d.ranges["order_count"] == Range(1.0, 10.0)
    assert d.search == "Ivan"


def test_unknown_params_are_ignored():
    d = compose_customer_filters({"isAdmin": "true", "password": "x", "$where": "1"})
    assert d.ranges == {} and d.equals == {}


def test_customer_invalid_date_is_rejected():
    with pytest.raises(BadRequestError) as e:
        compose_customer_filters({"registrationDateFrom": "not-a-date"})
    assert e.value.message == "Invalid registrationDateFrom"


def test_order_full_query():
    d = compose_order_filters({
        "sortField": "orderNumber", "status": "pending",
        "totalAmountFrom": "100", "orderDateFrom": "2024-07-01", "orderDateTo": "2024-08-01",
        "search": "+1",
    })
    assert d.sort_field is OrderSortField.ORDER_NUMBER
    assert d.equals == {"status": OrderStatus.PENDING}
    assert d.ranges["total_amount"] == Range(gte=100.0)
    # orders get the end-of-day clamp too
    assert d.ranges["created_at"].lte == datetime(2024, 8, 1, 23, 59, 59, 999000)
    assert d.matcher.number == 1


def test_order_status_outside_closed_set():
    with pytest.raises(BadRequestError):
        compose_order_filters({"status": "delivering"})


def test_order_sort_field_injection_falls_back():
    assert compose_order_filters({"sortField": "customer.password"}).sort_field is OrderSortField.CREATED_AT


def test_own_orders_default_page_size_is_five():
    d = compose_own_order_filters({"sortField": "totalAmount", "status": "bogus"})
    assert d.limit == 5
    assert d.sort_field is OrderSortField.CREATED_AT
    assert d.equals == {}
    assert compose_own_order_filters({"limit": "100"}).limit == 10


def test_clauses_and_across_fields():
    d = compose_order_filters({"status": "completed", "totalAmountFrom": "1", "totalAmountTo": "2"})
    clauses = d.clauses(Order)
    assert len(clauses) == 3
    rendered = [str(c) for c in clauses]
    assert "orders.status = :status_1" in rendered
    assert "orders.total_amount >= :total_amount_1" in rendered
    assert "orders.total_amount <= :total_amount_1" in rendered
