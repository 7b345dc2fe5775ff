"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import (
    String,
    and_,
    case,
    cast as sql_cast,
    delete,
    func,
    insert,
    literal,
    select,
    true,
    update,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from pointledger.adapters.sqlalchemy.mappings import (
    COLUMN_BY_LEDGER_COLUMN,
    PointsType,
    ledger_row_table,
)
from pointledger.domain.errors import (
    CustomerNotFound,
    InsufficientPoints,
    InvalidAmount,
    PersistFailed,
    QueryFailed,
    SnapshotUnavailable,
)
from pointledger.domain.model import CONTACT_FIELDS, LedgerRow
from pointledger.domain.query import (
    Between,
    Contains,
    Equals,
    LedgerColumn,
    QueryResult,
    SortDirection,
)
from pointledger.domain.reconciliation import SnapshotEntry, split_by_action

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Mapping, Sequence
    from decimal import Decimal

    from sqlalchemy import ColumnElement, CursorResult
    from sqlalchemy.orm import Session

    from pointledger.domain.model import ContactUpdate, CustomerCode
    from pointledger.domain.query import Ordering, Predicate, QueryPlan
    from pointledger.domain.reconciliation import MergedRow

log = logging.getLogger(__name__)

# keeps IN (...) lists under SQLite's bound-parameter limit
SNAPSHOT_CHUNK_SIZE: Final[int] = 500

_WRITE_COLUMNS: Final[tuple[str, ...]] = (
    "customer_code",
    "serial_number",
    *CONTACT_FIELDS,
    "total_points",
    "claimed_points",
    "unclaimed_points",
    "last_sales_date",
)

_UPSERT_DIALECTS: Final[dict[str, Callable[..., Any]]] = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _accrual_assignments(
    incoming: Mapping[str, ColumnElement[Any]],
) -> dict[str, ColumnElement[Any]]:
    """SET clause adding an accrual onto a stored row.

    ``claimed_points`` is never assigned. Empty incoming contact fields
    keep the stored value; ``last_sales_date`` only moves forward.
    """

    table = ledger_row_table
    stored_date = table.c.last_sales_date
    incoming_date = incoming["last_sales_date"]
    assignments: dict[str, ColumnElement[Any]] = {
        "total_points": table.c.total_points + incoming["total_points"],
        "unclaimed_points": table.c.unclaimed_points + incoming["unclaimed_points"],
        "serial_number": func.coalesce(incoming["serial_number"], table.c.serial_number),
        "last_sales_date": case(
            (incoming_date.is_(None), stored_date),
            (stored_date.is_(None), incoming_date),
            (incoming_date > stored_date, incoming_date),
            else_=stored_date,
        ),
    }
    for name in CONTACT_FIELDS:
        assignments[name] = case((incoming[name] == "", table.c[name]), else_=incoming[name])
    return assignments


def _insert_values(item: MergedRow) -> dict[str, object]:
    row = item.row
    values: dict[str, object] = {name: getattr(row, name) for name in _WRITE_COLUMNS}
    values["total_points"] = item.accrued_total
    values["unclaimed_points"] = item.accrued_unclaimed
    values["claimed_points"] = 0
    return values


class SqlAlchemyLedgerRepository:
    """Ledger store adapter.

    On SQLite and PostgreSQL every accrual write is one
    ``INSERT ... ON CONFLICT (customer_code) DO UPDATE`` adding the batch deltas
    server-side, so concurrent imports on the same customer cannot lose updates.
    Other dialects fall back to per-key ``UPDATE col = col + :delta``.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # read path -------------------------------------------------------------

    def fetch_snapshot(
        self, keys: Collection[CustomerCode] | None = None
    ) -> dict[CustomerCode, SnapshotEntry]:
        table = ledger_row_table
        base = select(table.c.customer_code, table.c.total_points, table.c.unclaimed_points)
        if keys is None:
            statements = [base]
        else:
            ordered = sorted(set(keys))
            statements = [
                base.where(table.c.customer_code.in_(ordered[start : start + SNAPSHOT_CHUNK_SIZE]))
                for start in range(0, len(ordered), SNAPSHOT_CHUNK_SIZE)
            ]

        snapshot: dict[CustomerCode, SnapshotEntry] = {}
        try:
            for stmt in statements:
                for code, total, unclaimed in self.session.execute(stmt):
                    snapshot[code] = SnapshotEntry(total_points=total, unclaimed_points=unclaimed)
        except SQLAlchemyError as exc:
            raise SnapshotUnavailable("Could not read existing ledger balances") from exc
        return snapshot

    def query(self, plan: QueryPlan) -> QueryResult:
        conditions = [self._condition(predicate) for predicate in plan.predicates]
        count_stmt = select(func.count()).select_from(ledger_row_table).where(*conditions)
        rows_stmt = (
            select(LedgerRow)
            .where(*conditions)
            .order_by(*(self._order_clause(ordering) for ordering in plan.ordering))
            .offset(plan.offset)
            .limit(plan.limit)
            .execution_options(populate_existing=True)
        )
        try:
            total_count = self.session.execute(count_stmt).scalar_one()
            rows = list(self.session.execute(rows_stmt).scalars())
        except (SQLAlchemyError, OverflowError) as exc:
            raise QueryFailed("Ledger query failed") from exc
        return QueryResult(rows=rows, total_count=total_count)

    def get(self, key: CustomerCode) -> LedgerRow | None:
        try:
            return self.session.get(LedgerRow, key, populate_existing=True)
        except SQLAlchemyError as exc:
            raise QueryFailed(f"Could not load customer {key}") from exc

    # write path ------------------------------------------------------------

    def upsert(self, rows: Sequence[MergedRow]) -> int:
        inserts, increments = split_by_action(rows)
        return self.insert_new(inserts) + self.increment(increments)

    def insert_new(self, rows: Sequence[MergedRow]) -> int:
        if not rows:
            return 0
        values = [_insert_values(item) for item in rows]
        if self._upsert_insert() is not None:
            self._execute_write(self._conflict_upsert(), values)
        else:
            self._execute_write(insert(ledger_row_table), values)
        log.debug("Inserted %s new ledger rows", len(values))
        return len(values)

    def increment(self, rows: Sequence[MergedRow]) -> int:
        if not rows:
            return 0
        values = [_insert_values(item) for item in rows]
        if self._upsert_insert() is not None:
            self._execute_write(self._conflict_upsert(), values)
        else:
            for value in values:
                self._increment_one(value)
        log.debug("Incremented %s existing ledger rows", len(values))
        return len(values)

    def claim(self, key: CustomerCode, amount: Decimal) -> LedgerRow:
        table = ledger_row_table
        stmt = (
            update(table)
            .where(table.c.customer_code == key)
            .where(table.c.unclaimed_points >= amount)
            .values(
                claimed_points=table.c.claimed_points + amount,
                unclaimed_points=table.c.unclaimed_points - amount,
            )
        )
        if self._execute_write(stmt).rowcount == 0:
            current = self._require(key)
            raise InsufficientPoints(key, amount, current.unclaimed_points)
        return self._require(key)

    def correct(
        self,
        key: CustomerCode,
        *,
        total_points: Decimal,
        claimed_points: Decimal | None = None,
    ) -> LedgerRow:
        table = ledger_row_table
        stmt = update(table).where(table.c.customer_code == key)
        if claimed_points is None:
            stmt = stmt.where(table.c.claimed_points <= total_points).values(
                total_points=total_points,
                unclaimed_points=literal(total_points, PointsType()) - table.c.claimed_points,
            )
        else:
            stmt = stmt.values(
                total_points=total_points,
                claimed_points=claimed_points,
                unclaimed_points=total_points - claimed_points,
            )
        if self._execute_write(stmt).rowcount == 0:
            current = self._require(key)
            raise InvalidAmount(
                f"Total points {total_points} below claimed points {current.claimed_points}"
            )
        return self._require(key)

    def update_contact(self, key: CustomerCode, contact: ContactUpdate) -> LedgerRow:
        changes = contact.changes()
        if changes:
            table = ledger_row_table
            stmt = update(table).where(table.c.customer_code == key).values(**changes)
            if self._execute_write(stmt).rowcount == 0:
                raise CustomerNotFound(key)
        return self._require(key)

    def delete_by_key(self, key: CustomerCode) -> None:
        table = ledger_row_table
        stmt = delete(table).where(table.c.customer_code == key)
        if self._execute_write(stmt).rowcount == 0:
            raise CustomerNotFound(key)

    # helpers ---------------------------------------------------------------

    def _require(self, key: CustomerCode) -> LedgerRow:
        row = self.get(key)
        if row is None:
            raise CustomerNotFound(key)
        return row

    def _upsert_insert(self) -> Callable[..., Any] | None:
        return _UPSERT_DIALECTS.get(self.session.get_bind().dialect.name)

    def _conflict_upsert(self) -> Any:
        insert_fn = self._upsert_insert()
        if insert_fn is None:
            raise PersistFailed("Dialect does not support ON CONFLICT upserts")
        stmt = insert_fn(ledger_row_table)
        excluded = {name: stmt.excluded[name] for name in _WRITE_COLUMNS}
        return stmt.on_conflict_do_update(
            index_elements=[ledger_row_table.c.customer_code],
            set_=_accrual_assignments(excluded),
        )

    def _increment_one(self, value: dict[str, object]) -> None:
        table = ledger_row_table
        incoming = {name: literal(value[name], table.c[name].type) for name in _WRITE_COLUMNS}
        stmt = (
            update(table)
            .where(table.c.customer_code == value["customer_code"])
            .values(_accrual_assignments(incoming))
        )
        if self._execute_write(stmt).rowcount == 0:
            self._execute_write(insert(ledger_row_table), [value])

    def _execute_write(
        self, stmt: Any, params: Sequence[Mapping[str, object]] | None = None
    ) -> CursorResult[Any]:
        try:
            result = self.session.execute(stmt, params) if params else self.session.execute(stmt)
        except (SQLAlchemyError, OverflowError) as exc:
            raise PersistFailed("Ledger write failed") from exc
        return cast("CursorResult[Any]", result)

    @staticmethod
    def _condition(predicate: Predicate) -> ColumnElement[bool]:
        column = COLUMN_BY_LEDGER_COLUMN[predicate.column]
        match predicate:
            case Equals(value=value):
                return column == value
            case Contains(column=LedgerColumn.CUSTOMER_CODE, text=text):
                return sql_cast(column, String).icontains(text, autoescape=True)
            case Contains(text=text):
                return column.icontains(text, autoescape=True)
            case Between(lower=lower, upper=upper):
                clauses: list[ColumnElement[bool]] = []
                if lower is not None:
                    clauses.append(column >= lower)
                if upper is not None:
                    clauses.append(column <= upper)
                return and_(*clauses) if clauses else true()
        raise TypeError(f"Unsupported predicate: {predicate!r}")

    @staticmethod
    def _order_clause(ordering: Ordering) -> ColumnElement[Any]:
        column = COLUMN_BY_LEDGER_COLUMN[ordering.column]
        return column.desc() if ordering.direction is SortDirection.DESC else column.asc()
