"""Reusable fakes and builders for ledger tests."""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from pointledger.domain.errors import (
    CustomerNotFound,
    InsufficientPoints,
    InvalidAmount,
    PersistFailed,
    SnapshotUnavailable,
)
from pointledger.domain.model import CONTACT_FIELDS, LedgerRow
from pointledger.domain.query import (
    Between,
    Contains,
    Equals,
    QueryResult,
    SortDirection,
)
from pointledger.domain.reconciliation import SnapshotEntry, split_by_action
from pointledger.domain.validation import RawRow

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence

    from pointledger.domain.model import ContactUpdate, CustomerCode
    from pointledger.domain.query import Predicate, QueryPlan
    from pointledger.domain.reconciliation import MergedRow


def make_raw_row(
    customer_code: str = "101",
    net_weight: str = "25.0",
    *,
    line_number: int | None = None,
    **extra: str,
) -> RawRow:
    """Build a raw input row keyed by the external column headers."""

    fields = {"CUSTOMER CODE": customer_code, "NET WEIGHT": net_weight}
    for key, value in extra.items():
        fields[key.replace("_", " ").upper()] = value
    return RawRow(fields=fields, line_number=line_number)


def make_ledger_row(
    customer_code: int = 101,
    *,
    total: str = "0.0",
    claimed: str = "0.0",
    **fields: object,
) -> LedgerRow:
    total_points = Decimal(total)
    claimed_points = Decimal(claimed)
    return LedgerRow(
        customer_code=customer_code,
        total_points=total_points,
        claimed_points=claimed_points,
        unclaimed_points=total_points - claimed_points,
        **fields,  # type: ignore[arg-type]
    )


class FakeLedgerRepository:
    """In-memory ledger store applying the same insert/increment rules as the SQL adapter."""

    def __init__(self, initial: Iterable[LedgerRow] | None = None) -> None:
        self.rows: dict[CustomerCode, LedgerRow] = {
            row.customer_code: replace(row) for row in initial or []
        }
        self.fail_snapshot = False
        self.fail_persist = False
        self.snapshot_keys: list[set[CustomerCode] | None] = []
        self.upserts: list[list[MergedRow]] = []
        self.plans: list[QueryPlan] = []

    def fetch_snapshot(
        self, keys: Collection[CustomerCode] | None = None
    ) -> dict[CustomerCode, SnapshotEntry]:
        self.snapshot_keys.append(None if keys is None else set(keys))
        if self.fail_snapshot:
            raise SnapshotUnavailable("snapshot read failed")
        return {
            code: SnapshotEntry(total_points=row.total_points, unclaimed_points=row.unclaimed_points)
            for code, row in self.rows.items()
            if keys is None or code in keys
        }

    def insert_new(self, rows: Sequence[MergedRow]) -> int:
        for item in rows:
            self.rows[item.customer_code] = replace(
                item.row,
                total_points=item.accrued_total,
                unclaimed_points=item.accrued_unclaimed,
                claimed_points=Decimal("0.0"),
            )
        return len(rows)

    def increment(self, rows: Sequence[MergedRow]) -> int:
        for item in rows:
            stored = self.rows[item.customer_code]
            incoming = item.row
            stored.total_points += item.accrued_total
            stored.unclaimed_points += item.accrued_unclaimed
            if incoming.serial_number is not None:
                stored.serial_number = incoming.serial_number
            for name in CONTACT_FIELDS:
                if getattr(incoming, name):
                    setattr(stored, name, getattr(incoming, name))
            if incoming.last_sales_date is not None and (
                stored.last_sales_date is None or incoming.last_sales_date > stored.last_sales_date
            ):
                stored.last_sales_date = incoming.last_sales_date
        return len(rows)

    def upsert(self, rows: Sequence[MergedRow]) -> int:
        if self.fail_persist:
            raise PersistFailed("write failed")
        self.upserts.append(list(rows))
        inserts, increments = split_by_action(rows)
        return self.insert_new(inserts) + self.increment(increments)

    def query(self, plan: QueryPlan) -> QueryResult:
        self.plans.append(plan)
        matching = [
            row
            for row in self.rows.values()
            if all(_matches(row, predicate) for predicate in plan.predicates)
        ]
        for ordering in reversed(plan.ordering):
            matching.sort(
                key=lambda row, name=ordering.column.value: _sort_key(getattr(row, name)),
                reverse=ordering.direction is SortDirection.DESC,
            )
        window = matching[plan.offset : plan.offset + plan.limit]
        return QueryResult(rows=window, total_count=len(matching))

    def delete_by_key(self, key: CustomerCode) -> None:
        if self.rows.pop(key, None) is None:
            raise CustomerNotFound(key)

    def get(self, key: CustomerCode) -> LedgerRow | None:
        return self.rows.get(key)

    def claim(self, key: CustomerCode, amount: Decimal) -> LedgerRow:
        row = self._require(key)
        if row.unclaimed_points < amount:
            raise InsufficientPoints(key, amount, row.unclaimed_points)
        row.claimed_points += amount
        row.unclaimed_points -= amount
        return row

    def correct(
        self,
        key: CustomerCode,
        *,
        total_points: Decimal,
        claimed_points: Decimal | None = None,
    ) -> LedgerRow:
        row = self._require(key)
        claimed = row.claimed_points if claimed_points is None else claimed_points
        if claimed > total_points:
            raise InvalidAmount("total below claimed")
        row.total_points = total_points
        row.claimed_points = claimed
        row.unclaimed_points = total_points - claimed
        return row

    def update_contact(self, key: CustomerCode, contact: ContactUpdate) -> LedgerRow:
        row = self._require(key)
        for name, value in contact.changes().items():
            setattr(row, name, value)
        return row

    def _require(self, key: CustomerCode) -> LedgerRow:
        row = self.rows.get(key)
        if row is None:
            raise CustomerNotFound(key)
        return row


def _sort_key(value: object) -> tuple[bool, object]:
    return (value is None, value if value is not None else 0)


def _matches(row: LedgerRow, predicate: Predicate) -> bool:
    value = getattr(row, predicate.column.value)
    match predicate:
        case Equals(value=expected):
            return value == expected
        case Contains(text=text):
            return text.lower() in str(value).lower()
        case Between(lower=lower, upper=upper):
            if value is None:
                return False
            if lower is not None and value < lower:
                return False
            return upper is None or value <= upper
    raise TypeError(predicate)


@dataclass(slots=True)
class FakeLedgerRepositories:
    ledger: FakeLedgerRepository


class FakeLedgerUnitOfWork:
    """Unit of work capturing ledger persistence interactions."""

    def __init__(self, repository: FakeLedgerRepository) -> None:
        self.repositories = FakeLedgerRepositories(ledger=repository)
        self.committed = False
        self.rollback_called = False

    def __enter__(self) -> FakeLedgerUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: object | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rollback_called = True


class FakeUnitOfWorkFactory:
    """Callable handing out units of work over one shared in-memory repository."""

    def __init__(self, repository: FakeLedgerRepository | None = None) -> None:
        self.repository = repository or FakeLedgerRepository()
        self.created: list[FakeLedgerUnitOfWork] = []

    def __call__(self) -> FakeLedgerUnitOfWork:
        uow = FakeLedgerUnitOfWork(self.repository)
        self.created.append(uow)
        return uow

    @property
    def commits(self) -> int:
        return sum(1 for uow in self.created if uow.committed)

