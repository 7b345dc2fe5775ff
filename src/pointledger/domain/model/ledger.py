"""Ledger row aggregate."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

from .primitives import ZERO_POINTS, CustomerCode, round_points

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

CONTACT_FIELDS: tuple[str, ...] = (
    "address1",
    "address2",
    "address3",
    "address4",
    "pin_code",
    "phone",
    "mobile",
)


@dataclass(kw_only=True)
class LedgerRow:
    """One customer's point balance.

    ``customer_code`` is the merge key and never changes once the row exists.
    ``unclaimed_points`` always equals ``total_points - claimed_points``.
    """

    customer_code: CustomerCode
    serial_number: int | None = None
    address1: str = ""
    address2: str = ""
    address3: str = ""
    address4: str = ""
    pin_code: str = ""
    phone: str = ""
    mobile: str = ""
    total_points: Decimal = ZERO_POINTS
    claimed_points: Decimal = ZERO_POINTS
    unclaimed_points: Decimal = ZERO_POINTS
    last_sales_date: date | None = None

    @classmethod
    def accrual(
        cls,
        *,
        customer_code: CustomerCode,
        points: Decimal,
        serial_number: int | None = None,
        last_sales_date: date | None = None,
        **contact: str,
    ) -> LedgerRow:
        """Build a fresh row whose whole balance is one unclaimed accrual."""

        points = round_points(points)
        return cls(
            customer_code=customer_code,
            serial_number=serial_number,
            total_points=points,
            claimed_points=ZERO_POINTS,
            unclaimed_points=points,
            last_sales_date=last_sales_date,
            **contact,
        )

    @property
    def balance_is_consistent(self) -> bool:
        return self.unclaimed_points == self.total_points - self.claimed_points

    def contact(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in CONTACT_FIELDS}


@dataclass(frozen=True, slots=True, kw_only=True)
class ContactUpdate:
    """Partial edit of a customer's informational fields.

    ``None`` means "leave unchanged"; an empty string clears the field.
    """

    serial_number: int | None = None
    address1: str | None = None
    address2: str | None = None
    address3: str | None = None
    address4: str | None = None
    pin_code: str | None = None
    phone: str | None = None
    mobile: str | None = None

    def changes(self) -> dict[str, object]:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not None
        }

    def __bool__(self) -> bool:
        return bool(self.changes())
