"""
Sanitising of raw list-query parameters.

Every value comes straight from the query string: a ``str``, a ``list`` of
strings when the key was repeated, or ``None`` when absent. Pagination and
sorting never fail, they fall back to their defaults. Filters fail with a
:class:`BadRequestError` naming the offending parameter.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from shop_api.core.errors import BadRequestError
from shop_api.models.order_models import OrderStatus

MAX_LIMIT = 10
DEFAULT_LIMIT = 10
DEFAULT_PAGE = 1
MAX_SEARCH_LENGTH = 50

E = TypeVar("E", bound=Enum)


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CustomerSortField(str, Enum):
    CREATED_AT = "createdAt"
    TOTAL_AMOUNT = "totalAmount"
    ORDER_COUNT = "orderCount"
    LAST_ORDER_DATE = "lastOrderDate"
    NAME = "name"


class OrderSortField(str, Enum):
    CREATED_AT = "createdAt"
    TOTAL_AMOUNT = "totalAmount"
    ORDER_NUMBER = "orderNumber"
    STATUS = "status"


def params_from_query(query_params) -> Dict[str, Any]:
    """Flattens a starlette QueryParams; repeated keys keep every value in a list."""
    params: Dict[str, Any] = {}
    for key in query_params.keys():
        values = query_params.getlist(key)
        params[key] = values[0] if len(values) == 1 else values
    return params


def to_number(value: Any) -> Optional[float]:
    """Finite float or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _positive_int(value: Any, default: int) -> int:
    number = to_number(value)
    if number is None or number <= 0:
        return default
    floored = math.floor(number)
    return floored if floored >= 1 else default


def safe_page(value: Any, default: int = DEFAULT_PAGE) -> int:
    return _positive_int(value, default)


def safe_limit(value: Any, default: int = DEFAULT_LIMIT) -> int:
    return min(_positive_int(value, default), MAX_LIMIT)


def safe_enum(value: Any, enum_cls: Type[E], default: E) -> E:
    if not isinstance(value, str):
        return default
    try:
        return enum_cls(value)
    except ValueError:
        return default


def safe_sort_order(value: Any) -> SortOrder:
    return safe_enum(value, SortOrder, SortOrder.DESC)


def safe_search(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequestError("Invalid search")
    term = value.strip()
    if len(term) > MAX_SEARCH_LENGTH:
        raise BadRequestError("Search is too long")
    return term or None


def parse_date(name: str, value: Any, end_of_day: bool = False) -> datetime:
    """
    ISO-8601 date or datetime to a naive UTC datetime.

    With ``end_of_day`` the result is the last millisecond of that calendar
    day, so an upper bound of ``2023-01-01`` still covers ``23:59:59.998``.
    """
    if not isinstance(value, str):
        raise BadRequestError(f"Invalid {name}")
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise BadRequestError(f"Invalid {name}") from None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    if end_of_day:
        parsed = parsed.replace(hour=23, minute=59, second=59, microsecond=999000)
    return parsed


def parse_number(name: str, value: Any) -> float:
    number = to_number(value)
    if number is None:
        raise BadRequestError(f"Invalid {name}")
    return number


def parse_status(value: Any) -> OrderStatus:
    if not isinstance(value, str):
        raise BadRequestError("Invalid status")
    try:
        return OrderStatus(value)
    except ValueError:
        raise BadRequestError("Invalid status") from None
