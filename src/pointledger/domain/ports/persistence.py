"""Ports for persisting the ledger.

``LedgerStore`` is the contract the import and query paths depend on.
``LedgerRepository`` adds the single-customer operations used by the ledger
services. Implementations must make ``upsert`` safe under concurrent imports
touching the same customer code: either an atomic insert-or-increment in the
store, or per-key serialisation at this boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from decimal import Decimal

    from pointledger.domain.model import ContactUpdate, CustomerCode, LedgerRow
    from pointledger.domain.query import QueryPlan, QueryResult
    from pointledger.domain.reconciliation import MergedRow, SnapshotEntry


@runtime_checkable
class LedgerStore(Protocol):
    """Minimal store contract for the reconciliation and query paths."""

    def fetch_snapshot(
        self, keys: Collection[CustomerCode] | None = None
    ) -> dict[CustomerCode, SnapshotEntry]:
        """Return stored balances for ``keys`` (all rows when ``None``).

        Raises ``SnapshotUnavailable`` when the store cannot be read.
        """
        ...

    def insert_new(self, rows: Sequence[MergedRow]) -> int:
        """Insert brand-new customers with ``claimed_points = 0``."""
        ...

    def increment(self, rows: Sequence[MergedRow]) -> int:
        """Add accrual deltas to existing customers; never writes ``claimed_points``."""
        ...

    def upsert(self, rows: Sequence[MergedRow]) -> int:
        """Apply a whole reconciled batch keyed on customer code.

        Raises ``PersistFailed`` when the write is rejected.
        """
        ...

    def query(self, plan: QueryPlan) -> QueryResult:
        """Execute ``plan``; raises ``QueryFailed`` on store errors."""
        ...

    def delete_by_key(self, key: CustomerCode) -> None:
        """Remove one customer; raises ``CustomerNotFound`` if absent."""
        ...


@runtime_checkable
class LedgerRepository(LedgerStore, Protocol):
    """Full persistence contract for ledger rows."""

    def get(self, key: CustomerCode) -> LedgerRow | None: ...

    def claim(self, key: CustomerCode, amount: Decimal) -> LedgerRow: ...

    def correct(
        self,
        key: CustomerCode,
        *,
        total_points: Decimal,
        claimed_points: Decimal | None = None,
    ) -> LedgerRow: ...

    def update_contact(self, key: CustomerCode, contact: ContactUpdate) -> LedgerRow: ...
