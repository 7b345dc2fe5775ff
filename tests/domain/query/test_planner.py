from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from pointledger.domain.model import MAX_POINTS, MIN_POINTS
from pointledger.domain.query import (
    Between,
    Contains,
    Equals,
    FilterSpec,
    LedgerColumn,
    Ordering,
    SortDirection,
    plan,
)


def test_empty_spec_has_no_predicates_and_default_order() -> None:
    result = plan(FilterSpec(), 10)

    assert result.predicates == ()
    assert result.ordering == (Ordering(LedgerColumn.CUSTOMER_CODE, SortDirection.ASC),)
    assert (result.page, result.offset, result.limit) == (1, 0, 10)


def test_numeric_customer_code_is_exact_match() -> None:
    result = plan(FilterSpec(customer_code=" 101 "), 10)

    assert result.predicates == (Equals(LedgerColumn.CUSTOMER_CODE, 101),)


def test_partial_customer_code_falls_back_to_substring() -> None:
    result = plan(FilterSpec(customer_code="10x"), 10)

    assert result.predicates == (Contains(LedgerColumn.CUSTOMER_CODE, "10x"),)


def test_text_filters_are_substring_predicates() -> None:
    result = plan(FilterSpec(address="  market ", mobile="98"), 10)

    assert result.predicates == (
        Contains(LedgerColumn.ADDRESS1, "market"),
        Contains(LedgerColumn.MOBILE, "98"),
    )


def test_blank_text_filters_are_ignored() -> None:
    result = plan(FilterSpec(customer_code="  ", address="", mobile=None), 10)

    assert result.predicates == ()


def test_ranges_allow_either_bound() -> None:
    result = plan(
        FilterSpec(
            total_points_min=5,
            total_points_max="10",
            unclaimed_points_max="2.5",
            last_sales_from="01-01-2024",
        ),
        10,
    )

    assert result.predicates == (
        Between(LedgerColumn.TOTAL_POINTS, Decimal(5), Decimal(10)),
        Between(LedgerColumn.UNCLAIMED_POINTS, None, Decimal("2.5")),
        Between(LedgerColumn.LAST_SALES_DATE, date(2024, 1, 1), None),
    )


def test_fractional_bounds_round_inwards_to_tenths() -> None:
    result = plan(FilterSpec(total_points_min="5.01", total_points_max="5.05"), 10)

    (between,) = result.predicates
    assert between == Between(LedgerColumn.TOTAL_POINTS, Decimal("5.1"), Decimal("5.0"))


def test_out_of_range_bounds_are_clamped_to_storable_points() -> None:
    result = plan(FilterSpec(total_points_min="-1e30", total_points_max="1e30"), 10)

    assert result.predicates == (
        Between(LedgerColumn.TOTAL_POINTS, MIN_POINTS, MAX_POINTS),
    )


def test_underscored_customer_code_is_not_an_exact_match() -> None:
    result = plan(FilterSpec(customer_code="1_0"), 10)

    assert result.predicates == (Contains(LedgerColumn.CUSTOMER_CODE, "1_0"),)


def test_malformed_filter_values_impose_no_constraint() -> None:
    result = plan(
        FilterSpec(
            total_points_min="lots",
            unclaimed_points_max="NaN",
            last_sales_to="someday",
        ),
        10,
    )

    assert result.predicates == ()


@pytest.mark.parametrize(
    ("sort_by", "direction", "expected"),
    [
        ("TOTAL POINTS", "DESC", SortDirection.DESC),
        ("total_points", "desc", SortDirection.DESC),
        ("total_points", "Asc", SortDirection.ASC),
        ("total_points", "sideways", SortDirection.ASC),
    ],
)
def test_sort_on_non_unique_column_adds_code_tiebreaker(
    sort_by: str, direction: str, expected: SortDirection
) -> None:
    result = plan(FilterSpec(sort_by=sort_by, sort_direction=direction), 10)

    assert result.ordering == (
        Ordering(LedgerColumn.TOTAL_POINTS, expected),
        Ordering(LedgerColumn.CUSTOMER_CODE, SortDirection.ASC),
    )


def test_sort_by_customer_code_needs_no_tiebreaker() -> None:
    result = plan(FilterSpec(sort_by="CUSTOMER CODE", sort_direction="desc"), 10)

    assert result.ordering == (Ordering(LedgerColumn.CUSTOMER_CODE, SortDirection.DESC),)


def test_unknown_sort_column_uses_default() -> None:
    result = plan(FilterSpec(sort_by="favourite colour"), 10)

    assert result.ordering == (Ordering(LedgerColumn.CUSTOMER_CODE, SortDirection.ASC),)


@pytest.mark.parametrize(
    ("page", "expected_page", "expected_offset"),
    [(1, 1, 0), (3, 3, 40), (0, 1, 0), (-2, 1, 0), ("2", 2, 20), ("two", 1, 0), (99, 99, 1960)],
)
def test_page_window(page: int | str, expected_page: int, expected_offset: int) -> None:
    result = plan(FilterSpec(page=page), 20)

    assert result.page == expected_page
    assert result.offset == expected_offset
    assert result.limit == 20


def test_non_positive_page_size_is_rejected() -> None:
    with pytest.raises(ValueError, match="page_size"):
        plan(FilterSpec(), 0)
