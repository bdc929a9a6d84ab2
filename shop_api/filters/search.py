from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import false, or_
from sqlalchemy.sql import ColumnElement

from shop_api.filters.sanitizer import to_number

LIKE_ESCAPE = "\\"
ADDRESS_MATCH_CAP = 50


def escape_like(term: str) -> str:
    """Makes every LIKE wildcard in `term` literal."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class SearchMatcher:
    """Case-insensitive literal substring matching for one trimmed search term."""

    def __init__(self, term: str):
        self.term = term
        self.pattern = f"%{escape_like(term)}%"

    @property
    def number(self) -> Optional[int]:
        """The term as an order number, when it is one."""
        number = to_number(self.term)
        if number is None or not number.is_integer():
            return None
        return int(number)

    def contains(self, *columns) -> ColumnElement:
        """Any of `columns` contains the term."""
        matches = [c.ilike(self.pattern, escape=LIKE_ESCAPE) for c in columns]
        return matches[0] if len(matches) == 1 else or_(*matches)

    def order_clause(self, title_column, order_number_column) -> ColumnElement:
        """Product title contains the term, or the order number equals it."""
        conditions = [self.contains(title_column)]
        if self.number is not None:
            conditions.append(order_number_column == self.number)
        return or_(*conditions)

    def customer_clause(
        self, name_column, last_order_column, address_order_ids: Iterable[int]
    ) -> ColumnElement:
        """
        Name contains the term, or the last order is one of the orders whose
        delivery address matched (resolved beforehand, see ADDRESS_MATCH_CAP).
        """
        ids = list(address_order_ids)
        by_address = last_order_column.in_(ids) if ids else false()
        return or_(self.contains(name_column), by_address)
