"""Query plan types shared by the planner and store adapters.

A plan is a closed description of one read: conjunctive predicates, a total
ordering, and an offset/limit window. Adapters translate it; they never
reinterpret filter input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .filters import LedgerColumn, SortDirection

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

    from pointledger.domain.model import LedgerRow


@dataclass(frozen=True, slots=True)
class Equals:
    column: LedgerColumn
    value: int


@dataclass(frozen=True, slots=True)
class Contains:
    """Case-insensitive substring match against the column's text form."""

    column: LedgerColumn
    text: str


@dataclass(frozen=True, slots=True)
class Between:
    """Inclusive range; either bound may be ``None``."""

    column: LedgerColumn
    lower: Decimal | date | None = None
    upper: Decimal | date | None = None


type Predicate = Equals | Contains | Between


@dataclass(frozen=True, slots=True)
class Ordering:
    column: LedgerColumn = LedgerColumn.CUSTOMER_CODE
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True, slots=True, kw_only=True)
class QueryPlan:
    predicates: tuple[Predicate, ...] = ()
    ordering: tuple[Ordering, ...] = (Ordering(),)
    page: int = 1
    offset: int = 0
    limit: int

    def page_state(self, total_count: int) -> PageState:
        return PageState(page=self.page, page_size=self.limit, total_count=total_count)


def total_pages(total_count: int, page_size: int) -> int:
    if total_count <= 0:
        return 0
    return -(-total_count // page_size)


@dataclass(frozen=True, slots=True, kw_only=True)
class PageState:
    """Navigable position within a result set of ``total_count`` rows.

    ``page`` is the page that was requested and may lie past the end; the
    navigation helpers always land inside ``[1, last_page]``.
    """

    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_count, self.page_size)

    @property
    def last_page(self) -> int:
        return max(self.total_pages, 1)

    @property
    def is_past_end(self) -> bool:
        return self.page > self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.clamp(self.page) > 1

    @property
    def has_next(self) -> bool:
        return self.clamp(self.page) < self.total_pages

    def clamp(self, page: int) -> int:
        return min(max(1, page), self.last_page)

    def previous_page(self) -> int:
        return self.clamp(self.page - 1)

    def next_page(self) -> int:
        return self.clamp(self.page + 1)

    def jump_to(self, page: int) -> int:
        return self.clamp(page)


@dataclass(slots=True)
class QueryResult:
    """Rows of one page plus the total number of rows matching the predicates."""

    rows: list[LedgerRow] = field(default_factory=list["LedgerRow"])
    total_count: int = 0
