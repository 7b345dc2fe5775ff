"""Translate a ``FilterSpec`` into a bounded, deterministic ``QueryPlan``.

The planner never fails on user input: a malformed filter value is treated as
absent. Only store execution can raise.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_FLOOR
from typing import TYPE_CHECKING

from pointledger.domain.model import MAX_POINTS, MIN_POINTS, POINTS_QUANTUM
from pointledger.domain.validation import parse_decimal, parse_filter_date, parse_integer

from .filters import LedgerColumn, SortDirection
from .plan import Between, Contains, Equals, Ordering, QueryPlan

if TYPE_CHECKING:
    from decimal import Decimal

    from .filters import FilterDate, FilterNumber, FilterSpec
    from .plan import Predicate

DEFAULT_ORDERING = Ordering(LedgerColumn.CUSTOMER_CODE, SortDirection.ASC)


def plan(spec: FilterSpec, page_size: int) -> QueryPlan:
    """Build the query plan for ``spec`` with pages of ``page_size`` rows."""

    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    page = _page_number(spec.page)
    return QueryPlan(
        predicates=tuple(_predicates(spec)),
        ordering=_ordering(spec),
        page=page,
        offset=(page - 1) * page_size,
        limit=page_size,
    )


def _predicates(spec: FilterSpec) -> list[Predicate]:
    predicates: list[Predicate] = []

    code = _customer_code_predicate(spec.customer_code)
    if code is not None:
        predicates.append(code)

    for column, value in (
        (LedgerColumn.ADDRESS1, spec.address),
        (LedgerColumn.MOBILE, spec.mobile),
    ):
        text = _text(value)
        if text:
            predicates.append(Contains(column, text))

    for column, lower, upper in (
        (LedgerColumn.TOTAL_POINTS, spec.total_points_min, spec.total_points_max),
        (LedgerColumn.UNCLAIMED_POINTS, spec.unclaimed_points_min, spec.unclaimed_points_max),
    ):
        numeric = _numeric_range(column, lower, upper)
        if numeric is not None:
            predicates.append(numeric)

    dates = _date_range(LedgerColumn.LAST_SALES_DATE, spec.last_sales_from, spec.last_sales_to)
    if dates is not None:
        predicates.append(dates)

    return predicates


def _customer_code_predicate(value: int | str | None) -> Predicate | None:
    as_int = parse_integer(value)
    if as_int is not None:
        return Equals(LedgerColumn.CUSTOMER_CODE, as_int)
    text = _text(value)
    if text:
        return Contains(LedgerColumn.CUSTOMER_CODE, text)
    return None


def _text(value: object) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value.strip() if isinstance(value, str) else ""


def _numeric_range(
    column: LedgerColumn, lower: FilterNumber, upper: FilterNumber
) -> Between | None:
    low = _points_bound(lower, rounding=ROUND_CEILING)
    high = _points_bound(upper, rounding=ROUND_FLOOR)
    if low is None and high is None:
        return None
    return Between(column, low, high)


def _points_bound(value: FilterNumber, *, rounding: str) -> Decimal | None:
    # stored points are whole tenths, so rounding inwards keeps the range inclusive
    parsed = parse_decimal(value)
    if parsed is None:
        return None
    clamped = min(max(parsed, MIN_POINTS), MAX_POINTS)
    return clamped.quantize(POINTS_QUANTUM, rounding=rounding)


def _date_range(column: LedgerColumn, lower: FilterDate, upper: FilterDate) -> Between | None:
    low, high = parse_filter_date(lower), parse_filter_date(upper)
    if low is None and high is None:
        return None
    return Between(column, low, high)


def _ordering(spec: FilterSpec) -> tuple[Ordering, ...]:
    column = LedgerColumn.parse(spec.sort_by) or DEFAULT_ORDERING.column
    direction = SortDirection.parse(spec.sort_direction) or DEFAULT_ORDERING.direction
    primary = Ordering(column, direction)
    if column is LedgerColumn.CUSTOMER_CODE:
        return (primary,)
    # customer_code is unique, so it makes the order total
    return (primary, DEFAULT_ORDERING)


def _page_number(value: int | str) -> int:
    page = parse_integer(value)
    if page is None or page < 1:
        return 1
    return page
