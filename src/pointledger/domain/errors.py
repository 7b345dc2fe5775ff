"""Error taxonomy for ledger operations.

Row-level validation problems are never raised; they are collected as
``RowRejection`` values on the import batch. Everything here aborts the
operation that raised it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from decimal import Decimal


class LedgerError(RuntimeError):
    """Base class for ledger failures surfaced to callers."""


class LedgerStoreError(LedgerError):
    """Raised by the store adapter when the backing store rejects an operation."""


class SnapshotUnavailable(LedgerStoreError):
    """The existing balances for an import batch could not be read."""


class PersistFailed(LedgerStoreError):
    """A write to the ledger store failed; nothing from the operation was kept."""


class QueryFailed(LedgerStoreError):
    """The store could not execute a read query."""


class CustomerNotFound(LedgerError):
    """No ledger row exists for the requested customer code."""

    def __init__(self, customer_code: int) -> None:
        super().__init__(f"No ledger row for customer code {customer_code}")
        self.customer_code = customer_code


class InvalidAmount(LedgerError):
    """A points or weight amount was malformed or outside its allowed range."""


class InsufficientPoints(LedgerError):
    """A claim asked for more points than the customer has unclaimed."""

    def __init__(self, customer_code: int, requested: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Customer {customer_code} has {available} unclaimed points, cannot claim {requested}"
        )
        self.customer_code = customer_code
        self.requested = requested
        self.available = available


class MalformedInputError(LedgerError):
    """A batch input file could not be decoded into rows."""
