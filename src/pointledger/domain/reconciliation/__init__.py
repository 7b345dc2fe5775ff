"""Reconciliation core for merging import batches into the ledger.

Flow for one batch:
1) validated accrual rows come in (see ``domain.validation``)
2) the caller reads a snapshot of existing balances for the batch's keys
3) ``reconcile`` folds rows into the snapshot, one merged row per key
4) the store applies inserts and increments in a single batched write
"""

from __future__ import annotations

from .contracts import LedgerSnapshot, MergeAction, MergedRow, SnapshotEntry
from .engine import reconcile, split_by_action

__all__ = [
    "LedgerSnapshot",
    "MergeAction",
    "MergedRow",
    "SnapshotEntry",
    "reconcile",
    "split_by_action",
]
