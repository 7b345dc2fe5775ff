"""Record schema and validation for raw ledger input.

Raw rows arrive as string-keyed records (one per line of a spreadsheet
export). ``validate_row`` turns each one into a typed ``LedgerRow`` or a
``RowRejection``; nothing unvalidated travels further than this module.

The same parse helpers coerce query filter inputs, where a malformed value
simply means "no constraint".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from pointledger.domain.model import (
    MAX_CUSTOMER_CODE,
    MAX_NET_WEIGHT,
    LedgerRow,
    points_for_weight,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

CUSTOMER_CODE_COLUMN: Final[str] = "CUSTOMER CODE"
NET_WEIGHT_COLUMN: Final[str] = "NET WEIGHT"
SERIAL_NUMBER_COLUMN: Final[str] = "SL NO"
LAST_SALES_DATE_COLUMN: Final[str] = "LAST SALES DATE"

# input column -> LedgerRow attribute
CONTACT_COLUMNS: Final[dict[str, str]] = {
    "ADDRESS1": "address1",
    "ADDRESS2": "address2",
    "ADDRESS3": "address3",
    "ADDRESS4": "address4",
    "PIN CODE": "pin_code",
    "PHONE": "phone",
    "MOBILE": "mobile",
}

REQUIRED_COLUMNS: Final[tuple[str, ...]] = (CUSTOMER_CODE_COLUMN, NET_WEIGHT_COLUMN)

EXTERNAL_DATE_FORMAT: Final[str] = "%d-%m-%Y"


class RejectionReason(StrEnum):
    INVALID_CUSTOMER_CODE = "InvalidCustomerCode"
    INVALID_WEIGHT = "InvalidWeight"


@dataclass(frozen=True, slots=True)
class RawRow:
    """One untyped input record keyed by column header."""

    fields: Mapping[str, str] = field(default_factory=dict[str, str])
    line_number: int | None = None

    def get(self, column: str) -> str:
        value = self.fields.get(column)
        return value.strip() if isinstance(value, str) else ""


@dataclass(frozen=True, slots=True)
class RowRejection:
    """Why a raw row was excluded from an import batch."""

    reason: RejectionReason
    detail: str
    line_number: int | None = None

    def __str__(self) -> str:
        where = f"line {self.line_number}: " if self.line_number is not None else ""
        return f"{where}{self.reason.value} ({self.detail})"


def parse_integer(value: object) -> int | None:
    """Parse ``value`` as a base-10 integer, returning ``None`` when it is not one."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        return int(value) if value.is_finite() and value == value.to_integral_value() else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    # int() also accepts digit-group underscores such as "1_0"
    if not text.lstrip("+-").isdecimal():
        return None
    try:
        return int(text, 10)
    except ValueError:
        return None


def parse_decimal(value: object) -> Decimal | None:
    """Parse ``value`` as a finite decimal, returning ``None`` otherwise."""

    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, float):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    return parsed if parsed.is_finite() else None


def parse_sales_date(value: object) -> date | None:
    """Parse an external ``dd-mm-yyyy`` date; anything else yields ``None``."""

    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), EXTERNAL_DATE_FORMAT).date()  # noqa: DTZ007
    except ValueError:
        return None


def parse_filter_date(value: object) -> date | None:
    """Coerce a date filter bound given as ``date``, ISO text, or ``dd-mm-yyyy``."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return parse_sales_date(value)


def validate_row(raw: RawRow) -> LedgerRow | RowRejection:
    """Validate one raw record into an accrual row or a rejection."""

    customer_code = parse_integer(raw.get(CUSTOMER_CODE_COLUMN))
    if customer_code is None or abs(customer_code) > MAX_CUSTOMER_CODE:
        return RowRejection(
            reason=RejectionReason.INVALID_CUSTOMER_CODE,
            detail=f"{CUSTOMER_CODE_COLUMN}={raw.get(CUSTOMER_CODE_COLUMN)!r}",
            line_number=raw.line_number,
        )

    net_weight = parse_decimal(raw.get(NET_WEIGHT_COLUMN))
    if net_weight is None or net_weight < 0 or net_weight > MAX_NET_WEIGHT:
        return RowRejection(
            reason=RejectionReason.INVALID_WEIGHT,
            detail=f"{NET_WEIGHT_COLUMN}={raw.get(NET_WEIGHT_COLUMN)!r}",
            line_number=raw.line_number,
        )

    contact = {attribute: raw.get(column) for column, attribute in CONTACT_COLUMNS.items()}
    return LedgerRow.accrual(
        customer_code=customer_code,
        points=points_for_weight(net_weight),
        serial_number=parse_integer(raw.get(SERIAL_NUMBER_COLUMN)),
        last_sales_date=parse_sales_date(raw.get(LAST_SALES_DATE_COLUMN)),
        **contact,
    )
