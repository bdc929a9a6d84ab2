from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy.sql import ColumnElement

from shop_api.filters.sanitizer import parse_date, parse_number

Bound = Union[float, datetime]


@dataclass
class Range:
    """Inclusive interval; a missing bound leaves that side open."""

    gte: Optional[Bound] = None
    lte: Optional[Bound] = None

    def clauses(self, column) -> List[ColumnElement]:
        out = []
        if self.gte is not None:
            out.append(column >= self.gte)
        if self.lte is not None:
            out.append(column <= self.lte)
        return out


class RangeFilterBuilder:
    """
    Collects ``<param>From`` / ``<param>To`` pairs into one Range per field.

    Both bounds of a field land in the same Range, so ``From`` and ``To`` never
    overwrite each other.
    """

    def __init__(self, params: Mapping[str, Any]):
        self.params = params
        self.ranges: Dict[str, Range] = {}

    def _merge(self, field: str, **bounds: Bound) -> None:
        current = self.ranges.setdefault(field, Range())
        for key, value in bounds.items():
            setattr(current, key, value)

    def date_range(self, field: str, param: str) -> "RangeFilterBuilder":
        low, high = f"{param}From", f"{param}To"
        if self.params.get(low) is not None:
            self._merge(field, gte=parse_date(low, self.params[low]))
        if self.params.get(high) is not None:
            self._merge(field, lte=parse_date(high, self.params[high], end_of_day=True))
        return self

    def number_range(self, field: str, param: str) -> "RangeFilterBuilder":
        low, high = f"{param}From", f"{param}To"
        if self.params.get(low) is not None:
            self._merge(field, gte=parse_number(low, self.params[low]))
        if self.params.get(high) is not None:
            self._merge(field, lte=parse_number(high, self.params[high]))
        return self

    def build(self) -> Dict[str, Range]:
        return dict(self.ranges)
