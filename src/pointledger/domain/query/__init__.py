"""Filtered query planning for the ledger read path."""

from __future__ import annotations

from .filters import FilterSpec, LedgerColumn, SortDirection
from .plan import (
    Between,
    Contains,
    Equals,
    Ordering,
    PageState,
    Predicate,
    QueryPlan,
    QueryResult,
    total_pages,
)
from .planner import DEFAULT_ORDERING, plan

__all__ = [
    "DEFAULT_ORDERING",
    "Between",
    "Contains",
    "Equals",
    "FilterSpec",
    "LedgerColumn",
    "Ordering",
    "PageState",
    "Predicate",
    "QueryPlan",
    "QueryResult",
    "SortDirection",
    "plan",
    "total_pages",
]
