"""Application service for importing accrual batches into the ledger."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pointledger.domain.model import LedgerRow
from pointledger.domain.reconciliation import MergedRow, reconcile
from pointledger.domain.validation import RawRow, RowRejection, validate_row

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pointledger.domain.ports import LedgerUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ImportBatch:
    """Ordered raw rows of one import and what became of them."""

    raw_rows: list[RawRow] = field(default_factory=list[RawRow])
    accepted: list[LedgerRow] = field(default_factory=list[LedgerRow])
    rejected: list[RowRejection] = field(default_factory=list[RowRejection])
    merged: list[MergedRow] = field(default_factory=list[MergedRow])
    persisted: bool = False

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    @property
    def rows_changed(self) -> int:
        return len(self.merged) if self.persisted else 0


def validate_batch(raw_rows: Iterable[RawRow]) -> ImportBatch:
    """Split ``raw_rows`` into accepted accruals and rejections, keeping input order."""

    batch = ImportBatch(raw_rows=list(raw_rows))
    for raw in batch.raw_rows:
        outcome = validate_row(raw)
        if isinstance(outcome, RowRejection):
            log.debug("Rejected row: %s", outcome)
            batch.rejected.append(outcome)
        else:
            batch.accepted.append(outcome)
    return batch


def import_batch(
    raw_rows: Iterable[RawRow],
    *,
    unit_of_work_factory: Callable[[], LedgerUnitOfWork],
) -> ImportBatch:
    """Validate, reconcile and persist ``raw_rows`` as one batched write.

    Store failures (``SnapshotUnavailable``, ``PersistFailed``) propagate and the
    unit of work rolls back, so a failed batch changes no rows.
    """

    batch = validate_batch(raw_rows)
    log.info(
        "Validated import batch: rows=%s, accepted=%s, rejected=%s",
        len(batch.raw_rows),
        batch.accepted_count,
        batch.rejected_count,
    )
    if not batch.accepted:
        log.warning("Import batch has no valid rows; nothing to persist")
        return batch

    keys = {row.customer_code for row in batch.accepted}
    with unit_of_work_factory() as uow:
        store = uow.repositories.ledger
        snapshot = store.fetch_snapshot(keys)
        merged = reconcile(batch.accepted, snapshot)
        store.upsert(merged)
        uow.commit()

    batch.merged = merged
    batch.persisted = True
    log.info(
        "Persisted import batch: customers=%s, new=%s",
        len(merged),
        sum(1 for item in merged if item.customer_code not in snapshot),
    )
    return batch
