"""Shared reconciliation contract components.

This module holds only:
- the snapshot shape read from the store before a merge
- the merged-row shape handed back to the store
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from decimal import Decimal

    from pointledger.domain.model import CustomerCode, LedgerRow


@dataclass(frozen=True, slots=True)
class SnapshotEntry:
    """Stored balances of one existing customer at the time of the snapshot."""

    total_points: Decimal
    unclaimed_points: Decimal

    @property
    def claimed_points(self) -> Decimal:
        return self.total_points - self.unclaimed_points


type LedgerSnapshot = Mapping[CustomerCode, SnapshotEntry]


class MergeAction(StrEnum):
    """How the store must apply one merged row."""

    INSERT = "insert"
    INCREMENT = "increment"


@dataclass(slots=True, kw_only=True)
class MergedRow:
    """Result of folding every accrual for one customer code in a batch.

    ``row`` carries the merged balances as seen against the snapshot.
    ``accrued_total``/``accrued_unclaimed`` carry only what this batch adds;
    the increment path writes these deltas and never writes ``claimed_points``.
    """

    action: MergeAction
    row: LedgerRow
    accrued_total: Decimal
    accrued_unclaimed: Decimal
    occurrences: int = 1

    @property
    def customer_code(self) -> CustomerCode:
        return self.row.customer_code
