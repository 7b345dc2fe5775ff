"""Filter/sort/page specification for ledger queries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal


class LedgerColumn(StrEnum):
    """Queryable ledger columns, valued by ``LedgerRow`` attribute name."""

    CUSTOMER_CODE = "customer_code"
    SERIAL_NUMBER = "serial_number"
    ADDRESS1 = "address1"
    ADDRESS2 = "address2"
    ADDRESS3 = "address3"
    ADDRESS4 = "address4"
    PIN_CODE = "pin_code"
    PHONE = "phone"
    MOBILE = "mobile"
    TOTAL_POINTS = "total_points"
    CLAIMED_POINTS = "claimed_points"
    UNCLAIMED_POINTS = "unclaimed_points"
    LAST_SALES_DATE = "last_sales_date"

    @classmethod
    def parse(cls, value: object) -> LedgerColumn | None:
        """Accept attribute names or external headers (``"TOTAL POINTS"``)."""

        if isinstance(value, LedgerColumn):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        key = value.strip().lower().replace(" ", "_").replace("-", "_")
        key = _HEADER_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


_HEADER_ALIASES: dict[str, str] = {
    "sl_no": "serial_number",
    "customercode": "customer_code",
}


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: object) -> SortDirection | None:
        if isinstance(value, SortDirection):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        if normalized in {"asc", "ascending"}:
            return cls.ASC
        if normalized in {"desc", "descending"}:
            return cls.DESC
        return None


type FilterNumber = Decimal | int | float | str | None
type FilterDate = date | str | None


@dataclass(frozen=True, slots=True, kw_only=True)
class FilterSpec:
    """Optional, AND-combined predicates plus ordering and a 1-based page.

    Values are taken as the user typed them; the planner coerces them and
    treats anything malformed as absent.
    """

    customer_code: int | str | None = None
    address: str | None = None
    mobile: str | None = None
    total_points_min: FilterNumber = None
    total_points_max: FilterNumber = None
    unclaimed_points_min: FilterNumber = None
    unclaimed_points_max: FilterNumber = None
    last_sales_from: FilterDate = None
    last_sales_to: FilterDate = None
    sort_by: LedgerColumn | str | None = None
    sort_direction: SortDirection | str | None = None
    page: int | str = 1
