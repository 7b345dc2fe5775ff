"""Fold validated accrual rows into the existing ledger snapshot.

``reconcile`` is pure: given the same rows and snapshot it always returns the
same merged rows, and it never touches the store. Duplicated customer codes in
one batch fold into the running merged value, so no accrual is dropped.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from pointledger.domain.model import CONTACT_FIELDS, round_points

from .contracts import LedgerSnapshot, MergeAction, MergedRow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from pointledger.domain.model import CustomerCode, LedgerRow

    from .contracts import SnapshotEntry


def reconcile(valid_rows: Iterable[LedgerRow], snapshot: LedgerSnapshot) -> list[MergedRow]:
    """Merge ``valid_rows`` against ``snapshot``; one result per distinct customer code.

    Results keep the order in which each customer code first appeared.
    """

    merged: dict[CustomerCode, MergedRow] = {}
    for row in valid_rows:
        current = merged.get(row.customer_code)
        if current is None:
            merged[row.customer_code] = _seed(row, snapshot.get(row.customer_code))
        else:
            merged[row.customer_code] = _fold(current, row)
    return list(merged.values())


def _seed(row: LedgerRow, existing: SnapshotEntry | None) -> MergedRow:
    if existing is None:
        return MergedRow(
            action=MergeAction.INSERT,
            row=replace(row),
            accrued_total=row.total_points,
            accrued_unclaimed=row.unclaimed_points,
        )

    total = round_points(existing.total_points + row.total_points)
    unclaimed = round_points(existing.unclaimed_points + row.unclaimed_points)
    return MergedRow(
        action=MergeAction.INCREMENT,
        row=replace(
            row,
            total_points=total,
            unclaimed_points=unclaimed,
            claimed_points=round_points(existing.claimed_points),
        ),
        accrued_total=row.total_points,
        accrued_unclaimed=row.unclaimed_points,
    )


def _fold(current: MergedRow, row: LedgerRow) -> MergedRow:
    merged_row = current.row
    contact = {
        name: getattr(row, name) or getattr(merged_row, name) for name in CONTACT_FIELDS
    }
    return MergedRow(
        action=current.action,
        row=replace(
            merged_row,
            serial_number=(
                row.serial_number if row.serial_number is not None else merged_row.serial_number
            ),
            total_points=round_points(merged_row.total_points + row.total_points),
            unclaimed_points=round_points(merged_row.unclaimed_points + row.unclaimed_points),
            last_sales_date=_latest(merged_row.last_sales_date, row.last_sales_date),
            **contact,
        ),
        accrued_total=round_points(current.accrued_total + row.total_points),
        accrued_unclaimed=round_points(current.accrued_unclaimed + row.unclaimed_points),
        occurrences=current.occurrences + 1,
    )


def _latest(first: date | None, second: date | None) -> date | None:
    if first is None:
        return second
    if second is None:
        return first
    return max(first, second)


def split_by_action(merged: Iterable[MergedRow]) -> tuple[list[MergedRow], list[MergedRow]]:
    """Partition merged rows into the insert path and the increment path."""

    inserts: list[MergedRow] = []
    increments: list[MergedRow] = []
    for item in merged:
        (inserts if item.action is MergeAction.INSERT else increments).append(item)
    return inserts, increments
