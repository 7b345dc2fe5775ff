"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from pointledger.adapters.spreadsheet import read_raw_rows
from pointledger.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from pointledger.config import get_ledger_config
from pointledger.domain import ledger_operations
from pointledger.domain.ledger_import import ImportBatch, import_batch
from pointledger.domain.ports.unit_of_work import LedgerUnitOfWork

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal
    from pathlib import Path

    from pointledger.domain.ledger_operations import LedgerPage
    from pointledger.domain.model import ContactUpdate, CustomerCode, LedgerRow
    from pointledger.domain.query import FilterSpec

UnitOfWorkFactory = Callable[[], LedgerUnitOfWork]


log = getLogger(__name__)


def _resolve_unit_of_work(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def import_ledger_file(
    path: Path,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportBatch:
    """Import a spreadsheet export of purchases into the ledger."""

    effective_uow = _resolve_unit_of_work(unit_of_work_factory)
    log.info("Starting ledger import from %s", path)
    batch = import_batch(read_raw_rows(path), unit_of_work_factory=effective_uow)
    log.info(
        f"Finished ledger import: accepted={batch.accepted_count}, "
        f"rejected={batch.rejected_count}, changed={batch.rows_changed}"
    )
    return batch


def list_ledger(
    spec: FilterSpec,
    *,
    page_size: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> LedgerPage:
    """Return one page of ledger rows matching ``spec``."""

    return ledger_operations.query_ledger(
        spec,
        page_size=page_size or get_ledger_config().page_size,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def show_customer(
    customer_code: CustomerCode,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> LedgerRow:
    return ledger_operations.get_customer(
        customer_code, unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory)
    )


def claim_points(
    customer_code: CustomerCode,
    amount: Decimal | str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> LedgerRow:
    return ledger_operations.claim_points(
        customer_code,
        amount,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def accrue_weight(
    customer_code: CustomerCode,
    net_weight: Decimal | str,
    *,
    sales_date: date | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportBatch:
    return ledger_operations.accrue_weight(
        customer_code,
        net_weight,
        sales_date=sales_date,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def correct_points(
    customer_code: CustomerCode,
    *,
    total_points: Decimal | str,
    claimed_points: Decimal | str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> LedgerRow:
    return ledger_operations.correct_points(
        customer_code,
        total_points=total_points,
        claimed_points=claimed_points,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def edit_customer(
    customer_code: CustomerCode,
    update: ContactUpdate,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> LedgerRow:
    return ledger_operations.update_contact(
        customer_code,
        update,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def delete_customer(
    customer_code: CustomerCode,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> None:
    ledger_operations.delete_customer(
        customer_code, unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory)
    )
