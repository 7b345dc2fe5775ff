"""Single-customer ledger operations and the paged read path."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pointledger.domain.errors import CustomerNotFound, InvalidAmount
from pointledger.domain.ledger_import import ImportBatch, import_batch
from pointledger.domain.model import MAX_POINTS, ZERO_POINTS, round_points
from pointledger.domain.query import plan
from pointledger.domain.validation import (
    CUSTOMER_CODE_COLUMN,
    EXTERNAL_DATE_FORMAT,
    LAST_SALES_DATE_COLUMN,
    NET_WEIGHT_COLUMN,
    RawRow,
    parse_decimal,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date
    from decimal import Decimal

    from pointledger.domain.model import ContactUpdate, CustomerCode, LedgerRow
    from pointledger.domain.ports import LedgerUnitOfWork
    from pointledger.domain.query import FilterSpec, PageState, QueryPlan

    UnitOfWorkFactory = Callable[[], LedgerUnitOfWork]

log = logging.getLogger(__name__)


@dataclass(slots=True)
class LedgerPage:
    """One page of query results with its navigation state."""

    rows: list[LedgerRow]
    state: PageState
    plan: QueryPlan


def query_ledger(
    spec: FilterSpec,
    *,
    page_size: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> LedgerPage:
    """Plan and execute ``spec``; a page past the end yields no rows, not an error."""

    query_plan = plan(spec, page_size)
    with unit_of_work_factory() as uow:
        result = uow.repositories.ledger.query(query_plan)
    state = query_plan.page_state(result.total_count)
    log.debug(
        "Ledger query page=%s/%s rows=%s total=%s",
        state.page,
        state.total_pages,
        len(result.rows),
        result.total_count,
    )
    return LedgerPage(rows=result.rows, state=state, plan=query_plan)


def get_customer(
    customer_code: CustomerCode, *, unit_of_work_factory: UnitOfWorkFactory
) -> LedgerRow:
    with unit_of_work_factory() as uow:
        row = uow.repositories.ledger.get(customer_code)
    if row is None:
        raise CustomerNotFound(customer_code)
    return row


def claim_points(
    customer_code: CustomerCode,
    amount: Decimal | int | str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> LedgerRow:
    """Move ``amount`` points from unclaimed to claimed."""

    points = _positive_points(amount, label="Claim amount")
    with unit_of_work_factory() as uow:
        row = uow.repositories.ledger.claim(customer_code, points)
        uow.commit()
    log.info("Customer %s claimed %s points", customer_code, points)
    return row


def accrue_weight(
    customer_code: CustomerCode,
    net_weight: Decimal | int | str,
    *,
    sales_date: date | None = None,
    unit_of_work_factory: UnitOfWorkFactory,
) -> ImportBatch:
    """Record one purchase by weight, creating the customer when absent."""

    weight = parse_decimal(net_weight)
    if weight is None or weight <= 0:
        raise InvalidAmount(f"Net weight must be a positive number, got {net_weight!r}")

    fields = {CUSTOMER_CODE_COLUMN: str(customer_code), NET_WEIGHT_COLUMN: str(weight)}
    if sales_date is not None:
        fields[LAST_SALES_DATE_COLUMN] = sales_date.strftime(EXTERNAL_DATE_FORMAT)
    batch = import_batch([RawRow(fields)], unit_of_work_factory=unit_of_work_factory)
    if batch.rejected:
        raise InvalidAmount(str(batch.rejected[0]))
    return batch


def correct_points(
    customer_code: CustomerCode,
    *,
    total_points: Decimal | int | str,
    claimed_points: Decimal | int | str | None = None,
    unit_of_work_factory: UnitOfWorkFactory,
) -> LedgerRow:
    """Overwrite the balance explicitly; unclaimed is recomputed as total - claimed."""

    total = _non_negative_points(total_points, label="Total points")
    claimed = (
        None
        if claimed_points is None
        else _non_negative_points(claimed_points, label="Claimed points")
    )
    if claimed is not None and claimed > total:
        raise InvalidAmount(f"Claimed points {claimed} exceed total points {total}")

    with unit_of_work_factory() as uow:
        row = uow.repositories.ledger.correct(
            customer_code, total_points=total, claimed_points=claimed
        )
        uow.commit()
    log.info("Corrected customer %s: total=%s claimed=%s", customer_code, total, claimed)
    return row


def update_contact(
    customer_code: CustomerCode,
    update: ContactUpdate,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> LedgerRow:
    with unit_of_work_factory() as uow:
        row = uow.repositories.ledger.update_contact(customer_code, update)
        uow.commit()
    return row


def delete_customer(
    customer_code: CustomerCode, *, unit_of_work_factory: UnitOfWorkFactory
) -> None:
    """Remove a customer permanently."""

    with unit_of_work_factory() as uow:
        uow.repositories.ledger.delete_by_key(customer_code)
        uow.commit()
    log.info("Deleted customer %s", customer_code)


def _positive_points(value: Decimal | int | str, *, label: str) -> Decimal:
    parsed = parse_decimal(value)
    if parsed is None:
        raise InvalidAmount(f"{label} must be a number, got {value!r}")
    points = round_points(parsed)
    if points <= ZERO_POINTS:
        raise InvalidAmount(f"{label} must be positive, got {value!r}")
    _check_storable(points, label=label)
    return points


def _non_negative_points(value: Decimal | int | str, *, label: str) -> Decimal:
    parsed = parse_decimal(value)
    if parsed is None:
        raise InvalidAmount(f"{label} must be a number, got {value!r}")
    points = round_points(parsed)
    if points < ZERO_POINTS:
        raise InvalidAmount(f"{label} must not be negative, got {value!r}")
    _check_storable(points, label=label)
    return points


def _check_storable(points: Decimal, *, label: str) -> None:
    if points > MAX_POINTS:
        raise InvalidAmount(f"{label} must not exceed {MAX_POINTS}, got {points}")
